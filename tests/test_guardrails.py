import pytest

from dynastyval.calibration import GuardrailViolation, guardrail_violations, validate_guardrails
from dynastyval.config import DEFAULT_PARAMETERS, AgeCurve
from dynastyval.models import Position


def test_defaults_pass():
    assert guardrail_violations(DEFAULT_PARAMETERS) == []
    validate_guardrails(DEFAULT_PARAMETERS)


def test_alpha_outside_bounds_is_rejected():
    with pytest.raises(GuardrailViolation) as excinfo:
        validate_guardrails(DEFAULT_PARAMETERS.with_updates(alpha=0.05))
    assert "alpha" in str(excinfo.value)


def test_alpha_inside_bounds_is_accepted():
    validate_guardrails(DEFAULT_PARAMETERS.with_updates(alpha=0.5))


def test_scoring_multiplier_bounds():
    params = DEFAULT_PARAMETERS.with_updates(scoring_multipliers={"PPR": 1.5, "Half": 0.85, "Standard": 0.5})
    violations = guardrail_violations(params)
    assert len(violations) == 2


def test_rising_rb_curve_after_26_is_rejected():
    curves = dict(DEFAULT_PARAMETERS.age_curves)
    curves[Position.RB] = AgeCurve(breakpoints=(22, 26, 28, 30), multipliers=(0.8, 1.0, 0.7, 0.8))
    with pytest.raises(GuardrailViolation) as excinfo:
        validate_guardrails(DEFAULT_PARAMETERS.with_updates(age_curves=curves))
    assert any("RB age curve" in violation for violation in excinfo.value.violations)


def test_every_violation_is_reported():
    params = DEFAULT_PARAMETERS.with_updates(alpha=0.95, wm_now=0.05, wp_future=0.95)
    with pytest.raises(GuardrailViolation) as excinfo:
        validate_guardrails(params)
    assert len(excinfo.value.violations) == 3


def test_rb_curve_rising_across_26_between_breakpoints_is_rejected():
    curves = dict(DEFAULT_PARAMETERS.age_curves)
    curves[Position.RB] = AgeCurve(breakpoints=(20, 25, 30), multipliers=(0.6, 0.9, 1.0))
    violations = guardrail_violations(DEFAULT_PARAMETERS.with_updates(age_curves=curves))
    assert violations == ["RB age curve rises from 0.920 at 26 to 1.000 at 30"]


def test_rb_curve_declining_across_26_is_accepted():
    curves = dict(DEFAULT_PARAMETERS.age_curves)
    curves[Position.RB] = AgeCurve(breakpoints=(20, 25, 30), multipliers=(0.8, 1.0, 0.6))
    assert guardrail_violations(DEFAULT_PARAMETERS.with_updates(age_curves=curves)) == []
