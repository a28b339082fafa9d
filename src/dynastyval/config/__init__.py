"""Configuration: league settings, static curves and calibration parameters."""

from .curves import RISK_MULTIPLIERS, AgeCurveTable, get_age_curve, iter_age_curves
from .league import (
    BASELINE_FINGERPRINT,
    DEFAULT_SETTINGS,
    SCORING_FORMATS,
    LeagueSettings,
    StarterCounts,
    parse_settings,
    settings_fingerprint,
)
from .parameters import DEFAULT_PARAMETERS, AgeCurve, CalibrationParameters
from .profile import SettingsProfile

__all__ = [
    "AgeCurve",
    "AgeCurveTable",
    "BASELINE_FINGERPRINT",
    "CalibrationParameters",
    "DEFAULT_PARAMETERS",
    "DEFAULT_SETTINGS",
    "RISK_MULTIPLIERS",
    "SCORING_FORMATS",
    "LeagueSettings",
    "SettingsProfile",
    "StarterCounts",
    "get_age_curve",
    "iter_age_curves",
    "parse_settings",
    "settings_fingerprint",
]
