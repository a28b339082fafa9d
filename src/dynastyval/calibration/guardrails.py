"""Safety bounds a fitted parameter set must satisfy before it can go live."""

from __future__ import annotations

from dynastyval.config.parameters import CalibrationParameters
from dynastyval.models import Position


ALPHA_BOUNDS = (0.1, 0.9)
WEIGHT_BOUNDS = (0.1, 0.9)
SCORING_MULTIPLIER_BOUNDS = (0.6, 1.4)
RB_DECLINE_AGE = 26


class GuardrailViolation(ValueError):
    """Raised when calibrated parameters fall outside the safety bounds."""

    def __init__(self, violations: list[str]):
        super().__init__("Calibrated parameters violate guardrails: " + "; ".join(violations))
        self.violations = violations


def _outside(value: float, bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return value < low or value > high


def guardrail_violations(parameters: CalibrationParameters) -> list[str]:
    violations: list[str] = []
    if _outside(parameters.alpha, ALPHA_BOUNDS):
        violations.append(f"alpha={parameters.alpha:.3f} outside {ALPHA_BOUNDS}")

    for name in ("wm_now", "wp_now", "wm_future", "wp_future"):
        value = getattr(parameters, name)
        if _outside(value, WEIGHT_BOUNDS):
            violations.append(f"{name}={value:.3f} outside {WEIGHT_BOUNDS}")

    for scoring, value in sorted(parameters.scoring_multipliers.items()):
        if _outside(value, SCORING_MULTIPLIER_BOUNDS):
            violations.append(f"scoring multiplier {scoring}={value:.3f} outside {SCORING_MULTIPLIER_BOUNDS}")

    rb_curve = parameters.curve_for(Position.RB)
    if rb_curve is not None:
        points = [(RB_DECLINE_AGE, rb_curve.multiplier_at(RB_DECLINE_AGE))]
        points.extend(
            (age, multiplier)
            for age, multiplier in zip(rb_curve.breakpoints, rb_curve.multipliers)
            if age > RB_DECLINE_AGE
        )
        for (age, multiplier), (next_age, next_multiplier) in zip(points, points[1:]):
            if next_multiplier > multiplier:
                violations.append(
                    f"RB age curve rises from {multiplier:.3f} at {age} to {next_multiplier:.3f} at {next_age}"
                )
    return violations


def validate_guardrails(parameters: CalibrationParameters) -> None:
    """Raise GuardrailViolation listing every broken bound; never clamps."""

    violations = guardrail_violations(parameters)
    if violations:
        raise GuardrailViolation(violations)
