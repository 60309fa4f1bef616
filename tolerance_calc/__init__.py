"""GD&T Conformance and Tolerance Stack-up Calculator.

Evaluates inspection data against ASME Y14.5-2018 callouts:
- Position at MMC, LMC or RFS with bonus tolerance
- Flatness from a point cloud or total indicator reading
- Perpendicularity of surfaces and axes
- Profile of a line or surface (bilateral, unilateral, unequally disposed)

and analyzes one-dimensional tolerance stack-ups:
- Worst-Case, RSS and Six Sigma accumulation
- Mean shift for asymmetric tolerances
- Percent contribution and Pareto ranking
- Acceptance checking with signed margins
"""

from tolerance_calc.results import (
    CalculatorError, CalculatorResponse, ErrorCode, PassFailStatus, Unit,
)
from tolerance_calc.rounding import DEFAULT_PRECISION, round_half_up
from tolerance_calc.gdt import (
    FeatureClass, FeatureType, MaterialCondition, SizeDimension, SizeLimits,
    calculate_bonus_tolerance, calculate_resultant_condition,
    calculate_size_limits, calculate_virtual_condition, feature_class,
)
from tolerance_calc.position import (
    MeasuredPosition, PositionInput, PositionResult, TruePosition,
    calculate_position, quick_position_lmc, quick_position_mmc, quick_position_rfs,
)
from tolerance_calc.flatness import (
    FlatnessInput, FlatnessResult, SurfacePoint,
    calculate_flatness, fit_plane, flatness_from_min_max, quick_flatness,
)
from tolerance_calc.perpendicularity import (
    PerpendicularityInput, PerpendicularityResult,
    calculate_perpendicularity, quick_perpendicularity_mmc, quick_perpendicularity_rfs,
)
from tolerance_calc.profile import (
    ProfileInput, ProfilePoint, ProfileResult, ProfileZoneType,
    calculate_profile, quick_profile_bilateral, quick_profile_unilateral,
)
from tolerance_calc.models import (
    AcceptanceCriteria, AnalysisMethod, StackupAnalysis, StackupDimension, StackupSign,
)
from tolerance_calc.analysis import (
    StackupResult, calculate_stackup, check_acceptance, compare_all_methods,
    validate_stackup_input,
)
from tolerance_calc.statistics import DimensionContribution, pareto

__all__ = [
    # Result envelope
    "CalculatorError", "CalculatorResponse", "ErrorCode", "PassFailStatus", "Unit",
    "DEFAULT_PRECISION", "round_half_up",
    # Feature of size
    "FeatureClass", "FeatureType", "MaterialCondition", "SizeDimension", "SizeLimits",
    "calculate_bonus_tolerance", "calculate_resultant_condition",
    "calculate_size_limits", "calculate_virtual_condition", "feature_class",
    # Position
    "MeasuredPosition", "PositionInput", "PositionResult", "TruePosition",
    "calculate_position", "quick_position_lmc", "quick_position_mmc", "quick_position_rfs",
    # Flatness
    "FlatnessInput", "FlatnessResult", "SurfacePoint",
    "calculate_flatness", "fit_plane", "flatness_from_min_max", "quick_flatness",
    # Perpendicularity
    "PerpendicularityInput", "PerpendicularityResult",
    "calculate_perpendicularity", "quick_perpendicularity_mmc", "quick_perpendicularity_rfs",
    # Profile
    "ProfileInput", "ProfilePoint", "ProfileResult", "ProfileZoneType",
    "calculate_profile", "quick_profile_bilateral", "quick_profile_unilateral",
    # Stack-up
    "AcceptanceCriteria", "AnalysisMethod", "StackupAnalysis", "StackupDimension",
    "StackupSign", "StackupResult", "calculate_stackup", "check_acceptance",
    "compare_all_methods", "validate_stackup_input",
    "DimensionContribution", "pareto",
]
__version__ = "0.1.0"
