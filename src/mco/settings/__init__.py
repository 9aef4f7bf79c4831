"""Settings resolution, validation and recommendations."""

from mco.settings.recommendations import (
    BitratePolicy,
    BitsPerPixelPolicy,
    Recommendation,
    calculate_optimal_settings,
    get_optimization_recommendations,
    get_recommended_settings,
)
from mco.settings.resolver import SettingsResolver, normalize_key
from mco.settings.types import SETTING_KEYS, ResolvedSettings
from mco.settings.validation import (
    SettingViolation,
    ValidationResult,
    validate_settings,
)

__all__ = [
    "SETTING_KEYS",
    "BitratePolicy",
    "BitsPerPixelPolicy",
    "Recommendation",
    "ResolvedSettings",
    "SettingViolation",
    "SettingsResolver",
    "ValidationResult",
    "calculate_optimal_settings",
    "get_optimization_recommendations",
    "get_recommended_settings",
    "normalize_key",
    "validate_settings",
]
