"""Perpendicularity tolerance calculator.

Orientation of a surface or axis at exactly 90 degrees to a datum. Surfaces
are evaluated at RFS; features of size (axis control) may carry an MMC or
LMC modifier and earn bonus tolerance the same way position does.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from tolerance_calc.gdt import (
    FeatureClass, FeatureType, MaterialCondition, SizeDimension, SizeLimits,
    calculate_bonus_tolerance, calculate_size_limits,
    calculate_virtual_condition, feature_class, supports_material_condition,
)
from tolerance_calc.results import (
    CalculatorError, CalculatorResponse, Clock, ErrorCode, PassFailStatus,
    Unit, precision_error, status_from, timestamp,
)
from tolerance_calc.rounding import DEFAULT_PRECISION, format_value, round_half_up

logger = logging.getLogger(__name__)


def angular_to_linear(angle_degrees: float, length: float) -> float:
    """Linear deviation over ``length`` for an angular error in degrees."""
    return length * math.tan(math.radians(angle_degrees))


def linear_to_angular(linear_deviation: float, length: float) -> float:
    """Angular error in degrees for a linear deviation over ``length``."""
    if length <= 0:
        raise ValueError(f"measurement length must be positive, got {length}")
    return math.degrees(math.atan(linear_deviation / length))


@dataclass
class PerpendicularityInput:
    """Input for a perpendicularity evaluation.

    Either ``linear_deviation`` or ``angular_deviation`` (degrees) together
    with ``measurement_length`` must be supplied; the linear value wins when
    both are present.
    """
    tolerance: float
    feature_type: FeatureType
    material_condition: MaterialCondition = MaterialCondition.RFS
    size_dimension: Optional[SizeDimension] = None
    actual_size: Optional[float] = None
    linear_deviation: Optional[float] = None
    angular_deviation: Optional[float] = None
    measurement_length: Optional[float] = None
    unit: Unit = Unit.MM
    precision: int = DEFAULT_PRECISION

    @classmethod
    def from_dict(cls, d: dict) -> PerpendicularityInput:
        size = d.get("size_dimension")
        return cls(
            tolerance=d["tolerance"],
            feature_type=FeatureType(d["feature_type"]),
            material_condition=MaterialCondition.parse(d.get("material_condition", "rfs")),
            size_dimension=SizeDimension.from_dict(size) if size else None,
            actual_size=d.get("actual_size"),
            linear_deviation=d.get("linear_deviation"),
            angular_deviation=d.get("angular_deviation"),
            measurement_length=d.get("measurement_length"),
            unit=Unit(d.get("unit", "mm")),
            precision=d.get("precision", DEFAULT_PRECISION),
        )


@dataclass(frozen=True)
class PerpendicularityResult:
    """Outcome of a perpendicularity evaluation."""
    status: PassFailStatus
    summary: str
    timestamp: str
    unit: Unit
    stated_tolerance: float
    material_condition: MaterialCondition
    bonus_tolerance: float
    total_allowable_tolerance: float
    measured_deviation: float
    tolerance_consumed: float
    virtual_condition: Optional[float] = None
    size_limits: Optional[SizeLimits] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "summary": self.summary,
            "timestamp": self.timestamp,
            "unit": self.unit.value,
            "stated_tolerance": self.stated_tolerance,
            "material_condition": self.material_condition.value,
            "bonus_tolerance": self.bonus_tolerance,
            "total_allowable_tolerance": self.total_allowable_tolerance,
            "measured_deviation": self.measured_deviation,
            "tolerance_consumed": self.tolerance_consumed,
            "virtual_condition": self.virtual_condition,
            "size_limits": self.size_limits.to_dict() if self.size_limits else None,
        }


def _validate(inp: PerpendicularityInput) -> list[CalculatorError]:
    errors: list[CalculatorError] = []
    err = precision_error(inp.precision)
    if err:
        errors.append(err)

    if inp.tolerance <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_TOLERANCE,
            "Perpendicularity tolerance must be greater than zero",
            "tolerance",
        ))

    mc = inp.material_condition
    if mc is not MaterialCondition.RFS:
        if inp.size_dimension is None:
            errors.append(CalculatorError(
                ErrorCode.MISSING_SIZE_DIMENSION,
                "Size dimension is required for MMC/LMC calculations",
                "size_dimension",
            ))
        if inp.actual_size is None:
            errors.append(CalculatorError(
                ErrorCode.MISSING_ACTUAL_SIZE,
                "Actual size is required for MMC/LMC calculations",
                "actual_size",
            ))
        if not supports_material_condition(inp.feature_type):
            errors.append(CalculatorError(
                ErrorCode.INVALID_MATERIAL_CONDITION,
                f"Feature type '{inp.feature_type.value}' does not support {mc.name}",
                "material_condition",
            ))

    if inp.linear_deviation is None and inp.angular_deviation is None:
        errors.append(CalculatorError(
            ErrorCode.NO_MEASUREMENTS,
            "Either linear deviation or angular deviation must be provided",
            "linear_deviation",
        ))
    if inp.angular_deviation is not None and inp.measurement_length is None:
        errors.append(CalculatorError(
            ErrorCode.MISSING_MEASUREMENT_LENGTH,
            "Measurement length is required when using angular deviation",
            "measurement_length",
        ))
    if inp.measurement_length is not None and inp.measurement_length <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_MEASUREMENT_LENGTH,
            "Measurement length must be greater than zero",
            "measurement_length",
        ))
    if (inp.size_dimension is not None
            and feature_class(inp.feature_type) is not feature_class(inp.size_dimension.feature_type)):
        errors.append(CalculatorError(
            ErrorCode.INVALID_FEATURE_TYPE,
            f"Size dimension is for a '{inp.size_dimension.feature_type.value}' but the "
            f"toleranced feature is a '{inp.feature_type.value}'",
            "size_dimension.feature_type",
        ))
    return errors


def calculate_perpendicularity(
    inp: PerpendicularityInput,
    clock: Optional[Clock] = None,
) -> CalculatorResponse[PerpendicularityResult]:
    """Evaluate perpendicularity conformance, with bonus for MMC/LMC axes."""
    errors = _validate(inp)
    if errors:
        logger.info("perpendicularity input rejected: %s", [e.code.value for e in errors])
        return CalculatorResponse.fail(errors)

    precision = inp.precision
    mc = inp.material_condition
    fclass = feature_class(inp.feature_type)

    limits: Optional[SizeLimits] = None
    bonus = 0.0
    vc: Optional[float] = None
    if inp.size_dimension is not None and inp.actual_size is not None:
        limits = calculate_size_limits(inp.size_dimension, precision)
        bonus = calculate_bonus_tolerance(inp.actual_size, limits, mc, fclass, precision)
        if mc is not MaterialCondition.RFS and fclass is not FeatureClass.SURFACE:
            vc = calculate_virtual_condition(limits, inp.tolerance, mc, fclass, precision)

    raw_total = inp.tolerance + bonus
    total = round_half_up(raw_total, precision)

    if inp.linear_deviation is not None:
        deviation = inp.linear_deviation
    else:
        deviation = angular_to_linear(inp.angular_deviation, inp.measurement_length)
    deviation = round_half_up(abs(deviation), precision)

    passed = deviation <= total
    consumed = round_half_up(deviation / raw_total * 100.0, 1)
    status = status_from(passed)
    logger.debug("perpendicularity %s: deviation=%s allowable=%s", status.value, deviation, total)

    verb = "is within tolerance" if passed else "exceeds tolerance"
    summary = (f"{status.name}: Perpendicularity {format_value(deviation)} {verb} "
               f"{format_value(total)}")
    if mc is not MaterialCondition.RFS and bonus > 0:
        summary += f" (includes {format_value(bonus)} bonus from {mc.name})"

    return CalculatorResponse.ok(PerpendicularityResult(
        status=status,
        summary=summary,
        timestamp=timestamp(clock),
        unit=inp.unit,
        stated_tolerance=inp.tolerance,
        material_condition=mc,
        bonus_tolerance=bonus,
        total_allowable_tolerance=total,
        measured_deviation=deviation,
        tolerance_consumed=consumed,
        virtual_condition=vc,
        size_limits=limits,
    ))


# ---------------------------------------------------------------------------
# Simplified call shapes
# ---------------------------------------------------------------------------

def quick_perpendicularity_rfs(deviation: float, tolerance: float) -> tuple[bool, float]:
    """(pass, percent consumed) for a surface at RFS."""
    response = calculate_perpendicularity(PerpendicularityInput(
        tolerance=tolerance,
        feature_type=FeatureType.SURFACE,
        linear_deviation=deviation,
        precision=6,
    ))
    if not response.success:
        raise ValueError(response.errors[0].message)
    r = response.result
    return r.status is PassFailStatus.PASS, r.tolerance_consumed


def quick_perpendicularity_mmc(
    deviation: float,
    stated_tolerance: float,
    mmc_size: float,
    actual_size: float,
    fclass: FeatureClass = FeatureClass.INTERNAL,
) -> tuple[bool, float, float]:
    """(pass, bonus, total tolerance) for an axis at MMC."""
    limits = SizeLimits(nominal=mmc_size, mmc=mmc_size, lmc=mmc_size,
                        upper_limit=mmc_size, lower_limit=mmc_size)
    bonus = calculate_bonus_tolerance(actual_size, limits, MaterialCondition.MMC, fclass,
                                      precision=6)
    total = stated_tolerance + bonus
    return abs(deviation) <= total, bonus, total
