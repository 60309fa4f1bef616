"""Feature-of-size support per ASME Y14.5-2018.

Size limits, material condition modifiers, bonus tolerance and the
virtual / resultant condition boundaries shared by the position and
perpendicularity calculators.

For internal features (holes, slots): MMC = smallest, LMC = largest.
For external features (pins, bosses): MMC = largest, LMC = smallest.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tolerance_calc.rounding import DEFAULT_PRECISION, round_half_up


# ---------------------------------------------------------------------------
# Feature and modifier enumerations
# ---------------------------------------------------------------------------

class FeatureType(Enum):
    """Toleranced feature types."""
    HOLE = "hole"
    SLOT = "slot"
    PIN = "pin"
    BOSS = "boss"
    SURFACE = "surface"
    PLANE = "plane"
    EDGE = "edge"


class FeatureClass(Enum):
    """Material side of a feature."""
    INTERNAL = "internal"   # MMC = smallest size
    EXTERNAL = "external"   # MMC = largest size
    SURFACE = "surface"     # not a feature of size


class MaterialCondition(Enum):
    """Material condition modifiers."""
    MMC = "mmc"             # Maximum Material Condition
    LMC = "lmc"             # Least Material Condition
    RFS = "rfs"             # Regardless of Feature Size (default)

    @classmethod
    def parse(cls, value: str) -> MaterialCondition:
        return cls(value.strip().lower())


def feature_class(feature_type: FeatureType) -> FeatureClass:
    """Classify a feature type as internal, external, or surface."""
    if feature_type in (FeatureType.HOLE, FeatureType.SLOT):
        return FeatureClass.INTERNAL
    if feature_type in (FeatureType.PIN, FeatureType.BOSS):
        return FeatureClass.EXTERNAL
    if feature_type in (FeatureType.SURFACE, FeatureType.PLANE, FeatureType.EDGE):
        return FeatureClass.SURFACE
    raise ValueError(f"Unknown feature type: {feature_type!r}")


def supports_material_condition(feature_type: FeatureType) -> bool:
    """True for features of size, which may carry MMC/LMC modifiers."""
    return feature_class(feature_type) is not FeatureClass.SURFACE


# ---------------------------------------------------------------------------
# Size dimension and limits
# ---------------------------------------------------------------------------

@dataclass
class SizeDimension:
    """A toleranced size callout.

    Attributes:
        nominal: Nominal size.
        tolerance_plus: Plus tolerance (positive value).
        tolerance_minus: Minus tolerance (positive value, will be subtracted).
        feature_type: Determines how MMC/LMC map onto the limits.
    """
    nominal: float
    tolerance_plus: float
    tolerance_minus: float
    feature_type: FeatureType

    def to_dict(self) -> dict:
        return {
            "nominal": self.nominal,
            "tolerance_plus": self.tolerance_plus,
            "tolerance_minus": self.tolerance_minus,
            "feature_type": self.feature_type.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> SizeDimension:
        return cls(
            nominal=d["nominal"],
            tolerance_plus=d.get("tolerance_plus", 0.0),
            tolerance_minus=d.get("tolerance_minus", 0.0),
            feature_type=FeatureType(d["feature_type"]),
        )


@dataclass(frozen=True)
class SizeLimits:
    """Size limits derived from a SizeDimension."""
    nominal: float
    mmc: float
    lmc: float
    upper_limit: float
    lower_limit: float

    def contains(self, size: float) -> bool:
        return self.lower_limit <= size <= self.upper_limit

    def to_dict(self) -> dict:
        return {
            "nominal": self.nominal,
            "mmc": self.mmc,
            "lmc": self.lmc,
            "upper_limit": self.upper_limit,
            "lower_limit": self.lower_limit,
        }


def calculate_size_limits(
    size: SizeDimension,
    precision: int = DEFAULT_PRECISION,
) -> SizeLimits:
    """Resolve upper/lower and MMC/LMC limits of a size dimension.

    Surfaces, planes and edges have no size-of-feature semantics, so both
    MMC and LMC collapse onto the nominal.
    """
    upper = round_half_up(size.nominal + size.tolerance_plus, precision)
    lower = round_half_up(size.nominal - size.tolerance_minus, precision)
    nominal = round_half_up(size.nominal, precision)

    fc = feature_class(size.feature_type)
    if fc is FeatureClass.INTERNAL:
        mmc, lmc = lower, upper
    elif fc is FeatureClass.EXTERNAL:
        mmc, lmc = upper, lower
    else:
        mmc = lmc = nominal

    return SizeLimits(
        nominal=nominal,
        mmc=mmc,
        lmc=lmc,
        upper_limit=upper,
        lower_limit=lower,
    )


# ---------------------------------------------------------------------------
# Bonus tolerance
# ---------------------------------------------------------------------------

def calculate_bonus_tolerance(
    actual_size: float,
    limits: SizeLimits,
    material_condition: MaterialCondition,
    fclass: FeatureClass,
    precision: int = DEFAULT_PRECISION,
) -> float:
    """Bonus tolerance earned by the actual size's departure from MMC/LMC.

    MMC, internal: actual - MMC (larger hole = more bonus)
    MMC, external: MMC - actual (smaller pin = more bonus)
    LMC, internal: LMC - actual (smaller hole = more bonus)
    LMC, external: actual - LMC (larger pin = more bonus)

    A negative raw bonus means the actual size violates its own limits; it is
    floored to zero and size conformance is reported separately.
    """
    if material_condition is MaterialCondition.RFS or fclass is FeatureClass.SURFACE:
        return 0.0

    internal = fclass is FeatureClass.INTERNAL
    if material_condition is MaterialCondition.MMC:
        bonus = actual_size - limits.mmc if internal else limits.mmc - actual_size
    else:
        bonus = limits.lmc - actual_size if internal else actual_size - limits.lmc

    return round_half_up(max(0.0, bonus), precision)


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------

def calculate_virtual_condition(
    limits: SizeLimits,
    tolerance: float,
    material_condition: MaterialCondition,
    fclass: FeatureClass,
    precision: int = DEFAULT_PRECISION,
) -> float:
    """Worst-case mating boundary of size and geometric tolerance.

    RFS has no fixed virtual condition; MMC is returned as a reference.
    """
    if material_condition is MaterialCondition.RFS:
        return round_half_up(limits.mmc, precision)

    internal = fclass is FeatureClass.INTERNAL
    if material_condition is MaterialCondition.MMC:
        vc = limits.mmc - tolerance if internal else limits.mmc + tolerance
    else:
        vc = limits.lmc + tolerance if internal else limits.lmc - tolerance
    return round_half_up(vc, precision)


def calculate_resultant_condition(
    limits: SizeLimits,
    tolerance: float,
    material_condition: MaterialCondition,
    fclass: FeatureClass,
    precision: int = DEFAULT_PRECISION,
) -> float:
    """Boundary at the opposite extreme from the virtual condition.

    RFS returns LMC as a reference.
    """
    if material_condition is MaterialCondition.RFS:
        return round_half_up(limits.lmc, precision)

    internal = fclass is FeatureClass.INTERNAL
    if material_condition is MaterialCondition.MMC:
        rc = limits.lmc + tolerance if internal else limits.lmc - tolerance
    else:
        rc = limits.mmc - tolerance if internal else limits.mmc + tolerance
    return round_half_up(rc, precision)
