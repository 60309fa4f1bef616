"""Position tolerance calculator.

Evaluates size and location conformance of a feature of size against a
position callout at MMC, LMC or RFS, with cylindrical (diametral) or
planar tolerance zones.

Key formulas:
    Total allowable = stated tolerance + bonus
    Radial deviation = |actual - basic|
    Actual position (diametral zone) = 2 * radial deviation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from tolerance_calc.gdt import (
    FeatureClass, FeatureType, MaterialCondition, SizeDimension, SizeLimits,
    calculate_bonus_tolerance, calculate_resultant_condition,
    calculate_size_limits, calculate_virtual_condition, feature_class,
)
from tolerance_calc.results import (
    CalculatorError, CalculatorResponse, Clock, ErrorCode, PassFailStatus,
    Unit, precision_error, status_from, timestamp,
)
from tolerance_calc.rounding import DEFAULT_PRECISION, format_value, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class TruePosition:
    """Basic (theoretically exact) location from the drawing."""
    basic_x: float
    basic_y: float
    basic_z: Optional[float] = None


@dataclass
class MeasuredPosition:
    """Inspected feature location and size."""
    actual_x: float
    actual_y: float
    actual_size: float
    actual_z: Optional[float] = None


@dataclass
class PositionInput:
    """Input for a position evaluation.

    Attributes:
        geometric_tolerance: Stated position tolerance.
        material_condition: Modifier applied to the tolerance.
        feature_type: Toleranced feature (determines internal/external).
        size_dimension: Size callout of the feature.
        true_position: Basic location.
        measured: Inspection data.
        diametral_zone: True for a cylindrical zone (Ø in the frame).
        unit: Unit of all lengths.
        precision: Output rounding, 1-6 decimals.
    """
    geometric_tolerance: float
    material_condition: MaterialCondition
    feature_type: FeatureType
    size_dimension: SizeDimension
    true_position: TruePosition
    measured: MeasuredPosition
    diametral_zone: bool = True
    unit: Unit = Unit.MM
    precision: int = DEFAULT_PRECISION

    @classmethod
    def from_dict(cls, d: dict) -> PositionInput:
        tp = d["true_position"]
        m = d["measured"]
        return cls(
            geometric_tolerance=d["geometric_tolerance"],
            material_condition=MaterialCondition.parse(d.get("material_condition", "rfs")),
            feature_type=FeatureType(d["feature_type"]),
            size_dimension=SizeDimension.from_dict(d["size_dimension"]),
            true_position=TruePosition(tp["basic_x"], tp["basic_y"], tp.get("basic_z")),
            measured=MeasuredPosition(
                actual_x=m["actual_x"],
                actual_y=m["actual_y"],
                actual_size=m["actual_size"],
                actual_z=m.get("actual_z"),
            ),
            diametral_zone=d.get("diametral_zone", True),
            unit=Unit(d.get("unit", "mm")),
            precision=d.get("precision", DEFAULT_PRECISION),
        )


@dataclass(frozen=True)
class PositionDeviation:
    dx: float
    dy: float
    dz: Optional[float]
    radial: float
    actual_position: float


@dataclass(frozen=True)
class PositionResult:
    """Outcome of a position evaluation."""
    status: PassFailStatus
    summary: str
    timestamp: str
    unit: Unit
    stated_tolerance: float
    material_condition: MaterialCondition
    size_limits: SizeLimits
    actual_size: float
    bonus_tolerance: float
    total_allowable_tolerance: float
    virtual_condition: float
    resultant_condition: float
    deviation_x: float
    deviation_y: float
    deviation_z: Optional[float]
    radial_deviation: float
    actual_position_tolerance: float
    tolerance_consumed: float
    size_conformance: bool
    position_conformance: bool

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "summary": self.summary,
            "timestamp": self.timestamp,
            "unit": self.unit.value,
            "stated_tolerance": self.stated_tolerance,
            "material_condition": self.material_condition.value,
            "size_limits": self.size_limits.to_dict(),
            "actual_size": self.actual_size,
            "bonus_tolerance": self.bonus_tolerance,
            "total_allowable_tolerance": self.total_allowable_tolerance,
            "virtual_condition": self.virtual_condition,
            "resultant_condition": self.resultant_condition,
            "deviation_x": self.deviation_x,
            "deviation_y": self.deviation_y,
            "deviation_z": self.deviation_z,
            "radial_deviation": self.radial_deviation,
            "actual_position_tolerance": self.actual_position_tolerance,
            "tolerance_consumed": self.tolerance_consumed,
            "size_conformance": self.size_conformance,
            "position_conformance": self.position_conformance,
        }


def calculate_position_deviation(
    actual_x: float,
    actual_y: float,
    basic_x: float,
    basic_y: float,
    actual_z: Optional[float] = None,
    basic_z: Optional[float] = None,
    diametral: bool = True,
    precision: int = DEFAULT_PRECISION,
) -> PositionDeviation:
    """Deviation of the actual location from true position.

    The Z component is used only when both actual and basic Z are given.
    """
    dx = round_half_up(actual_x - basic_x, precision)
    dy = round_half_up(actual_y - basic_y, precision)
    dz = None
    if actual_z is not None and basic_z is not None:
        dz = round_half_up(actual_z - basic_z, precision)

    components = [dx, dy] if dz is None else [dx, dy, dz]
    radial = float(np.linalg.norm(np.array(components, dtype=float)))
    actual = 2.0 * radial if diametral else radial

    return PositionDeviation(
        dx=dx,
        dy=dy,
        dz=dz,
        radial=round_half_up(radial, precision),
        actual_position=round_half_up(actual, precision),
    )


def _validate(inp: PositionInput) -> list[CalculatorError]:
    errors: list[CalculatorError] = []
    err = precision_error(inp.precision)
    if err:
        errors.append(err)

    if inp.geometric_tolerance <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_TOLERANCE,
            "Geometric tolerance must be greater than zero",
            "geometric_tolerance",
        ))
    if inp.size_dimension.nominal <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_SIZE,
            "Nominal size must be greater than zero",
            "size_dimension.nominal",
        ))
    if inp.size_dimension.tolerance_plus < 0 or inp.size_dimension.tolerance_minus < 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_SIZE_TOLERANCE,
            "Size tolerances cannot be negative",
            "size_dimension",
        ))
    if inp.measured.actual_size <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_ACTUAL_SIZE,
            "Actual measured size must be greater than zero",
            "measured.actual_size",
        ))
    if feature_class(inp.feature_type) is not feature_class(inp.size_dimension.feature_type):
        errors.append(CalculatorError(
            ErrorCode.INVALID_FEATURE_TYPE,
            f"Size dimension is for a '{inp.size_dimension.feature_type.value}' but the "
            f"toleranced feature is a '{inp.feature_type.value}'",
            "size_dimension.feature_type",
        ))
    if (feature_class(inp.feature_type) is FeatureClass.SURFACE
            and inp.material_condition is not MaterialCondition.RFS):
        errors.append(CalculatorError(
            ErrorCode.INVALID_FEATURE_TYPE,
            f"Feature type '{inp.feature_type.value}' is not valid for "
            f"{inp.material_condition.name} calculations",
            "feature_type",
        ))
    return errors


def calculate_position(
    inp: PositionInput,
    clock: Optional[Clock] = None,
) -> CalculatorResponse[PositionResult]:
    """Evaluate position conformance including bonus tolerance.

    Args:
        inp: Position callout, size callout and inspection data.
        clock: Optional time source for the result timestamp.

    Returns:
        CalculatorResponse with a PositionResult, or every validation error.
    """
    errors = _validate(inp)
    if errors:
        logger.info("position input rejected: %s", [e.code.value for e in errors])
        return CalculatorResponse.fail(errors)

    precision = inp.precision
    mc = inp.material_condition
    fclass = feature_class(inp.feature_type)
    limits = calculate_size_limits(inp.size_dimension, precision)

    actual_size = inp.measured.actual_size
    size_ok = limits.contains(actual_size)

    bonus = calculate_bonus_tolerance(actual_size, limits, mc, fclass, precision)
    raw_total = inp.geometric_tolerance + bonus
    total = round_half_up(raw_total, precision)

    vc = calculate_virtual_condition(limits, inp.geometric_tolerance, mc, fclass, precision)
    rc = calculate_resultant_condition(limits, inp.geometric_tolerance, mc, fclass, precision)

    dev = calculate_position_deviation(
        inp.measured.actual_x, inp.measured.actual_y,
        inp.true_position.basic_x, inp.true_position.basic_y,
        inp.measured.actual_z, inp.true_position.basic_z,
        diametral=inp.diametral_zone,
        precision=precision,
    )

    position_ok = dev.actual_position <= total
    status = status_from(size_ok and position_ok)
    # Unrounded allowable: a small tolerance may round to zero at low precision
    consumed = round_half_up(dev.actual_position / raw_total * 100.0, 1)

    logger.debug(
        "position %s: actual=%s allowable=%s bonus=%s size_ok=%s",
        status.value, dev.actual_position, total, bonus, size_ok,
    )

    return CalculatorResponse.ok(PositionResult(
        status=status,
        summary=_summary(status, dev.actual_position, total, bonus, mc,
                         size_ok, position_ok, inp.diametral_zone),
        timestamp=timestamp(clock),
        unit=inp.unit,
        stated_tolerance=inp.geometric_tolerance,
        material_condition=mc,
        size_limits=limits,
        actual_size=round_half_up(actual_size, precision),
        bonus_tolerance=bonus,
        total_allowable_tolerance=total,
        virtual_condition=vc,
        resultant_condition=rc,
        deviation_x=dev.dx,
        deviation_y=dev.dy,
        deviation_z=dev.dz,
        radial_deviation=dev.radial,
        actual_position_tolerance=dev.actual_position,
        tolerance_consumed=consumed,
        size_conformance=size_ok,
        position_conformance=position_ok,
    ))


def _summary(
    status: PassFailStatus,
    actual: float,
    allowable: float,
    bonus: float,
    mc: MaterialCondition,
    size_ok: bool,
    position_ok: bool,
    diametral: bool,
) -> str:
    sym = "Ø" if diametral else ""
    parts = [
        "PASS: Position tolerance satisfied." if status is PassFailStatus.PASS
        else "FAIL: Position tolerance exceeded.",
        f"Actual position: {sym}{format_value(actual)} vs Allowable: {sym}{format_value(allowable)}",
    ]
    if mc is not MaterialCondition.RFS and bonus > 0:
        parts.append(f"Bonus tolerance: {format_value(bonus)} ({mc.name})")
    if not size_ok:
        parts.append("WARNING: Actual size is outside size limits.")
    if not position_ok:
        parts.append("Position deviation exceeds total allowable tolerance.")
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Simplified call shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuickPositionResult:
    passed: bool
    bonus: float
    total_tolerance: float
    actual_position: float


def _quick(
    stated_tolerance: float,
    limits: SizeLimits,
    actual_size: float,
    material_condition: MaterialCondition,
    fclass: FeatureClass,
    deviation_x: float,
    deviation_y: float,
) -> QuickPositionResult:
    bonus = calculate_bonus_tolerance(actual_size, limits, material_condition, fclass,
                                      precision=6)
    total = stated_tolerance + bonus
    dev = calculate_position_deviation(deviation_x, deviation_y, 0.0, 0.0,
                                       diametral=True, precision=6)
    return QuickPositionResult(
        passed=dev.actual_position <= total,
        bonus=bonus,
        total_tolerance=total,
        actual_position=dev.actual_position,
    )


def _single_limit(size: float) -> SizeLimits:
    return SizeLimits(nominal=size, mmc=size, lmc=size, upper_limit=size, lower_limit=size)


def quick_position_mmc(
    stated_tolerance: float,
    mmc_size: float,
    actual_size: float,
    deviation_x: float,
    deviation_y: float,
    fclass: FeatureClass = FeatureClass.INTERNAL,
) -> QuickPositionResult:
    """Diametral position at MMC from the MMC size alone."""
    return _quick(stated_tolerance, _single_limit(mmc_size), actual_size,
                  MaterialCondition.MMC, fclass, deviation_x, deviation_y)


def quick_position_lmc(
    stated_tolerance: float,
    lmc_size: float,
    actual_size: float,
    deviation_x: float,
    deviation_y: float,
    fclass: FeatureClass = FeatureClass.INTERNAL,
) -> QuickPositionResult:
    """Diametral position at LMC from the LMC size alone."""
    return _quick(stated_tolerance, _single_limit(lmc_size), actual_size,
                  MaterialCondition.LMC, fclass, deviation_x, deviation_y)


def quick_position_rfs(
    stated_tolerance: float,
    deviation_x: float,
    deviation_y: float,
) -> QuickPositionResult:
    """Diametral position at RFS; no bonus."""
    return _quick(stated_tolerance, _single_limit(0.0), 0.0,
                  MaterialCondition.RFS, FeatureClass.INTERNAL, deviation_x, deviation_y)
