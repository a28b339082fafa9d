"""Offline calibration of the composite valuation weights."""

from __future__ import annotations

import logging
import random
import threading
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from dynastyval.config.env import env_float, env_int
from dynastyval.config.parameters import CalibrationParameters
from dynastyval.models import PlayerRecord, Position
from dynastyval.persistence import CalibrationRun, RunStateError, ValuationStore
from dynastyval.valuation import valuate_player

from .guardrails import GuardrailViolation, validate_guardrails
from .registry import ParameterRegistry
from .stats import mape, spearman, weighted_overall


logger = logging.getLogger(__name__)

_FOLDS_ENV = "DYNASTYVAL_CALIBRATION_FOLDS"
_STEP_ENV = "DYNASTYVAL_SEARCH_STEP"
_ROUNDS_ENV = "DYNASTYVAL_SEARCH_ROUNDS"
_SEED_ENV = "DYNASTYVAL_CALIBRATION_SEED"

_FOLDS_DEFAULT = 5
_STEP_DEFAULT = 0.05
_ROUNDS_DEFAULT = 20
_SEED_DEFAULT = 17

# The local search never proposes weights outside this band.
SEARCH_BOUNDS = (0.2, 0.8)
SEARCH_COORDINATES = ("alpha", "now_blend", "future_blend")
_MIN_IMPROVEMENT = 1e-9

RANK_SHIFT_TOP_N = 50
SIGNIFICANT_SHIFT = 10

# (young cutoff, mid cutoff) per position; anything older is "old".
AGE_BANDS: Dict[Position, Tuple[int, int]] = {
    Position.QB: (26, 30),
    Position.RB: (23, 26),
    Position.WR: (24, 27),
    Position.TE: (25, 28),
}


class CalibrationCancelled(RuntimeError):
    """Raised at a fold boundary once cancellation has been requested."""


class InsufficientTrainingData(ValueError):
    """Raised when there are too few trainable players to build the folds."""


@dataclass(frozen=True)
class FoldResult:
    fold: int
    train_size: int
    validation_size: int
    train_rho: float
    validation_rho: float
    parameters: Dict[str, float]


@dataclass(frozen=True)
class CalibrationMetrics:
    overall_rho: float
    position_rhos: Dict[str, float]
    overall_mape: float
    position_mapes: Dict[str, float]
    training_size: int


@dataclass(frozen=True)
class RankShift:
    player_id: str
    player_name: str
    before_rank: int
    after_rank: int
    shift: int


@dataclass(frozen=True)
class PositionRankShifts:
    position: str
    top50_shifts: List[RankShift]
    significant_shifts: int


def age_band(player: PlayerRecord) -> str:
    if player.age is None:
        return "unknown"
    young, mid = AGE_BANDS[player.position]
    if player.age <= young:
        return "young"
    if player.age <= mid:
        return "mid"
    return "old"


def _by_position(players: Sequence[PlayerRecord]) -> Dict[Position, List[PlayerRecord]]:
    groups: Dict[Position, List[PlayerRecord]] = defaultdict(list)
    for player in players:
        groups[player.position].append(player)
    return groups


class CalibrationEngine:
    """Fits ``CalibrationParameters`` to market values with stratified k-fold CV.

    Every run is recorded in the store and always ends in a terminal state.
    Candidate parameters are only ever made live through the registry, and
    only from a completed run.
    """

    def __init__(
        self,
        store: ValuationStore,
        registry: ParameterRegistry | None = None,
        *,
        folds: int | None = None,
        search_step: float | None = None,
        search_rounds: int | None = None,
        seed: int | None = None,
    ):
        self.store = store
        self.registry = registry or ParameterRegistry(store)
        self.folds = folds if folds is not None else env_int(_FOLDS_ENV, _FOLDS_DEFAULT, min_value=2)
        self.search_step = (
            search_step
            if search_step is not None
            else env_float(_STEP_ENV, _STEP_DEFAULT, clamp_min=0.005, clamp_max=0.2)
        )
        self.search_rounds = (
            search_rounds if search_rounds is not None else env_int(_ROUNDS_ENV, _ROUNDS_DEFAULT, min_value=1)
        )
        self.seed = seed if seed is not None else env_int(_SEED_ENV, _SEED_DEFAULT)

    def run_calibration(
        self,
        *,
        cancel_event: threading.Event | None = None,
        auto_promote: bool = False,
        run_id: str | None = None,
    ) -> CalibrationRun:
        base = self.registry.active()
        run = self.store.create_calibration_run(
            parameters=base.parameters.model_dump(mode="json"),
            run_id=run_id,
        )
        run_id = run.run_id

        try:
            self.store.update_calibration_run(run_id, status="running")
            logger.info(
                "Calibration run %s started from parameter version %s (%s folds)",
                run_id,
                base.version,
                self.folds,
            )
            players = self.training_data()
            best, fold_results = self.cross_validate(players, base.parameters, cancel_event=cancel_event)
            validate_guardrails(best)
            metrics = self.compute_metrics(best, players)
            rank_shifts = self.compute_rank_shifts(best, players)
        except CalibrationCancelled as exc:
            logger.warning("Calibration run %s cancelled: %s", run_id, exc)
            return self._finish(run_id, status="cancelled", error=str(exc))
        except GuardrailViolation as exc:
            logger.warning("Calibration run %s rejected: %s", run_id, exc)
            return self._finish(run_id, status="failed", error=str(exc))
        except Exception as exc:
            logger.exception("Calibration run %s failed", run_id)
            message = str(exc) or exc.__class__.__name__
            return self._finish(run_id, status="failed", error=message)

        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Calibration run %s cancelled after the final fold", run_id)
            return self._finish(run_id, status="cancelled", error="Cancelled after the final fold")

        metrics_payload = asdict(metrics)
        metrics_payload["folds"] = [asdict(result) for result in fold_results]
        completed = self._finish(
            run_id,
            status="completed",
            parameters=best.model_dump(mode="json"),
            metrics=metrics_payload,
            rank_shifts=[asdict(shift) for shift in rank_shifts],
        )
        if completed.status != "completed":
            return completed
        logger.info(
            "Calibration run %s completed: rho=%.3f mape=%.3f",
            run_id,
            metrics.overall_rho,
            metrics.overall_mape,
        )
        if auto_promote:
            self.registry.promote_run(run_id)
        return completed

    def _finish(self, run_id: str, **changes) -> CalibrationRun:
        try:
            return self.store.update_calibration_run(run_id, **changes)
        except RunStateError as exc:
            # Another process closed the run first; its terminal state wins.
            logger.warning("Calibration run %s not updated: %s", run_id, exc)
            run = self.store.get_calibration_run(run_id)
            if run is None:
                raise
            return run

    def training_data(self) -> List[PlayerRecord]:
        players = [player for player in self.store.list_training_players() if player.is_trainable]
        if len(players) < self.folds:
            raise InsufficientTrainingData(
                f"Need at least {self.folds} players with market value and projections, found {len(players)}"
            )
        logger.info("Assembled %s training players", len(players))
        return players

    def stratified_folds(self, players: Sequence[PlayerRecord]) -> List[List[PlayerRecord]]:
        """Split players into k folds balanced across position x age band strata."""

        strata: Dict[Tuple[str, str], List[PlayerRecord]] = defaultdict(list)
        for player in players:
            strata[(player.position.value, age_band(player))].append(player)

        rng = random.Random(self.seed)
        folds: List[List[PlayerRecord]] = [[] for _ in range(self.folds)]
        slot = 0
        for key in sorted(strata):
            members = sorted(strata[key], key=lambda player: player.player_id)
            rng.shuffle(members)
            for player in members:
                folds[slot % self.folds].append(player)
                slot += 1
        return folds

    def cross_validate(
        self,
        players: Sequence[PlayerRecord],
        start: CalibrationParameters,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Tuple[CalibrationParameters, List[FoldResult]]:
        folds = self.stratified_folds(players)
        best_parameters = start
        best_score = float("-inf")
        results: List[FoldResult] = []

        for index, validation in enumerate(folds):
            if cancel_event is not None and cancel_event.is_set():
                raise CalibrationCancelled(f"Cancelled before fold {index + 1} of {len(folds)}")
            train = [player for fold_index, fold in enumerate(folds) if fold_index != index for player in fold]
            candidate = self.fit_fold(train, start)
            train_rho = self.score(candidate, train)
            validation_rho = self.score(candidate, validation)
            logger.info(
                "Fold %s/%s: train rho=%.4f validation rho=%.4f (n=%s)",
                index + 1,
                len(folds),
                train_rho,
                validation_rho,
                len(validation),
            )
            results.append(
                FoldResult(
                    fold=index + 1,
                    train_size=len(train),
                    validation_size=len(validation),
                    train_rho=train_rho,
                    validation_rho=validation_rho,
                    parameters=candidate.weight_vector(),
                )
            )
            if validation_rho > best_score:
                best_score = validation_rho
                best_parameters = candidate

        return best_parameters, results

    def fit_fold(self, train: Sequence[PlayerRecord], start: CalibrationParameters) -> CalibrationParameters:
        """Coordinate search: nudge one blend at a time while training rho improves."""

        best = start
        best_score = self.score(best, train)
        for _ in range(self.search_rounds):
            improved = False
            for coordinate in SEARCH_COORDINATES:
                for direction in (1.0, -1.0):
                    candidate = _nudge(best, coordinate, direction * self.search_step)
                    if candidate is None:
                        continue
                    score = self.score(candidate, train)
                    if score > best_score + _MIN_IMPROVEMENT:
                        best, best_score = candidate, score
                        improved = True
            if not improved:
                break
        return best

    def score(self, parameters: CalibrationParameters, players: Sequence[PlayerRecord]) -> float:
        predicted = [valuate_player(player, parameters=parameters).composite_value for player in players]
        actual = [float(player.market_value or 0.0) for player in players]
        return spearman(predicted, actual)

    def compute_metrics(self, parameters: CalibrationParameters, players: Sequence[PlayerRecord]) -> CalibrationMetrics:
        position_rhos: Dict[str, float] = {}
        position_mapes: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        for position, group in sorted(_by_position(players).items(), key=lambda item: item[0].value):
            predicted = [valuate_player(player, parameters=parameters).composite_value for player in group]
            actual = [float(player.market_value or 0.0) for player in group]
            position_rhos[position.value] = spearman(predicted, actual)
            position_mapes[position.value] = mape(predicted, actual)
            counts[position.value] = len(group)
        return CalibrationMetrics(
            overall_rho=weighted_overall(position_rhos, counts),
            position_rhos=position_rhos,
            overall_mape=weighted_overall(position_mapes, counts),
            position_mapes=position_mapes,
            training_size=len(players),
        )

    def compute_rank_shifts(
        self, parameters: CalibrationParameters, players: Sequence[PlayerRecord]
    ) -> List[PositionRankShifts]:
        report: List[PositionRankShifts] = []
        for position, group in sorted(_by_position(players).items(), key=lambda item: item[0].value):
            composite = {
                player.player_id: valuate_player(player, parameters=parameters).composite_value for player in group
            }
            before = sorted(group, key=lambda player: (-(player.market_value or 0.0), player.player_id))
            after = sorted(group, key=lambda player: (-composite[player.player_id], player.player_id))
            after_rank = {player.player_id: index + 1 for index, player in enumerate(after)}

            shifts = []
            for index, player in enumerate(before[:RANK_SHIFT_TOP_N]):
                new_rank = after_rank[player.player_id]
                shifts.append(
                    RankShift(
                        player_id=player.player_id,
                        player_name=player.name,
                        before_rank=index + 1,
                        after_rank=new_rank,
                        shift=new_rank - (index + 1),
                    )
                )
            report.append(
                PositionRankShifts(
                    position=position.value,
                    top50_shifts=shifts,
                    significant_shifts=sum(1 for shift in shifts if abs(shift.shift) >= SIGNIFICANT_SHIFT),
                )
            )
        return report


def _in_bounds(value: float) -> bool:
    low, high = SEARCH_BOUNDS
    return low - 1e-9 <= value <= high + 1e-9


def _nudge(parameters: CalibrationParameters, coordinate: str, delta: float) -> Optional[CalibrationParameters]:
    if coordinate == "alpha":
        value = round(parameters.alpha + delta, 4)
        return parameters.with_updates(alpha=value) if _in_bounds(value) else None
    if coordinate == "now_blend":
        value = round(parameters.wm_now + delta, 4)
        if not _in_bounds(value):
            return None
        return parameters.with_updates(wm_now=value, wp_now=round(1.0 - value, 4))
    if coordinate == "future_blend":
        value = round(parameters.wm_future + delta, 4)
        if not _in_bounds(value):
            return None
        return parameters.with_updates(wm_future=value, wp_future=round(1.0 - value, 4))
    raise ValueError(f"Unknown search coordinate {coordinate!r}")
