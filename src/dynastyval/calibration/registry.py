"""Versioned, atomically swapped active parameter set."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from dynastyval.config.parameters import DEFAULT_PARAMETERS, CalibrationParameters
from dynastyval.persistence import ParameterVersion, ValuationStore

from .guardrails import validate_guardrails


logger = logging.getLogger(__name__)

# Version number reported while the built-in defaults are live.
DEFAULT_VERSION = 0


@dataclass(frozen=True)
class ActiveParameters:
    version: int
    parameters: CalibrationParameters
    source_run_id: Optional[str] = None


class ParameterRegistry:
    """Holds exactly one live parameter set.

    Readers get an immutable ``ActiveParameters`` reference; promotion writes
    a new version row and swaps the single active pointer, so a concurrent
    reader sees either the old set or the new one, never a mix.
    """

    def __init__(self, store: ValuationStore):
        self._store = store
        self._lock = threading.Lock()
        self._current = self._load_active()

    def _load_active(self) -> ActiveParameters:
        stored = self._store.get_active_version()
        if stored is None:
            return ActiveParameters(version=DEFAULT_VERSION, parameters=DEFAULT_PARAMETERS)
        return self._to_active(stored)

    @staticmethod
    def _to_active(stored: ParameterVersion) -> ActiveParameters:
        return ActiveParameters(
            version=stored.version,
            parameters=CalibrationParameters.model_validate(stored.parameters),
            source_run_id=stored.source_run_id,
        )

    def active(self) -> ActiveParameters:
        return self._current

    def refresh(self) -> ActiveParameters:
        """Reload the active pointer from the store (another process may have promoted)."""

        with self._lock:
            self._current = self._load_active()
            return self._current

    def promote(self, parameters: CalibrationParameters, *, source_run_id: Optional[str] = None) -> ActiveParameters:
        validate_guardrails(parameters)
        with self._lock:
            stored = self._store.activate_parameters(
                parameters.model_dump(mode="json"),
                source_run_id=source_run_id,
            )
            self._current = self._to_active(stored)
        logger.info("Promoted parameter version %s (run %s)", stored.version, source_run_id)
        return self._current

    def promote_run(self, run_id: str) -> ActiveParameters:
        run = self._store.get_calibration_run(run_id)
        if run is None:
            raise KeyError(f"Calibration run {run_id} not found")
        if run.status != "completed":
            raise ValueError(f"Calibration run {run_id} is {run.status}; only completed runs can be promoted")
        parameters = CalibrationParameters.model_validate(run.parameters)
        return self.promote(parameters, source_run_id=run_id)

    def rollback(self, version: int) -> ActiveParameters:
        with self._lock:
            stored = self._store.set_active_version(version)
            self._current = self._to_active(stored)
        logger.info("Rolled back to parameter version %s", version)
        return self._current
