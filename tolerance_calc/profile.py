"""Profile tolerance calculator.

Profile of a line or surface controls form (and, with datums, orientation
and location) within a zone laid about the true profile. The zone may be
bilateral, entirely outside or inside the true profile, or unequally
disposed (the U modifier).

Sign convention for measured deviations: positive = outside (material
added), negative = inside (material removed).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from tolerance_calc.results import (
    CalculatorError, CalculatorResponse, Clock, ErrorCode, PassFailStatus,
    Unit, precision_error, status_from, timestamp,
)
from tolerance_calc.rounding import DEFAULT_PRECISION, format_value, round_half_up

logger = logging.getLogger(__name__)


class ProfileZoneType(Enum):
    """How the profile zone is distributed about the true profile."""
    BILATERAL = "bilateral"
    UNILATERAL_OUTSIDE = "unilateral-outside"
    UNILATERAL_INSIDE = "unilateral-inside"
    UNEQUALLY_DISPOSED = "unequally-disposed"

    @property
    def description(self) -> str:
        return {
            ProfileZoneType.BILATERAL: "Bilateral (equally disposed)",
            ProfileZoneType.UNILATERAL_OUTSIDE: "Unilateral (all outside)",
            ProfileZoneType.UNILATERAL_INSIDE: "Unilateral (all inside)",
            ProfileZoneType.UNEQUALLY_DISPOSED: "Unequally disposed",
        }[self]


@dataclass(frozen=True)
class ProfilePoint:
    """A point on the profile and its deviation normal to the true profile."""
    position: float
    deviation: float


@dataclass
class ProfileInput:
    """Input for a profile evaluation.

    Attributes:
        tolerance: Total zone width.
        zone_type: Zone distribution.
        measured_points: Deviations measured along the profile.
        outside_amount: Portion of the zone outside the true profile
            (unequally-disposed zones only).
        form_only: True when the callout has no datums.
        unit: Unit of all lengths.
        precision: Output rounding, 1-6 decimals.
    """
    tolerance: float
    zone_type: ProfileZoneType = ProfileZoneType.BILATERAL
    measured_points: list[ProfilePoint] = field(default_factory=list)
    outside_amount: Optional[float] = None
    form_only: bool = False
    unit: Unit = Unit.MM
    precision: int = DEFAULT_PRECISION

    @classmethod
    def from_dict(cls, d: dict) -> ProfileInput:
        return cls(
            tolerance=d["tolerance"],
            zone_type=ProfileZoneType(d.get("zone_type", "bilateral")),
            measured_points=[ProfilePoint(p.get("position", i), p["deviation"])
                             for i, p in enumerate(d.get("measured_points", []))],
            outside_amount=d.get("outside_amount"),
            form_only=d.get("form_only", False),
            unit=Unit(d.get("unit", "mm")),
            precision=d.get("precision", DEFAULT_PRECISION),
        )


@dataclass(frozen=True)
class ProfileResult:
    """Outcome of a profile evaluation."""
    status: PassFailStatus
    summary: str
    timestamp: str
    unit: Unit
    stated_tolerance: float
    zone_type: ProfileZoneType
    allowable_outside: float
    allowable_inside: float
    max_deviation_outside: float
    max_deviation_inside: float
    total_measured_zone: float
    tolerance_consumed: float
    point_count: int
    non_conforming_points: tuple[int, ...]

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "summary": self.summary,
            "timestamp": self.timestamp,
            "unit": self.unit.value,
            "stated_tolerance": self.stated_tolerance,
            "zone_type": self.zone_type.value,
            "allowable_outside": self.allowable_outside,
            "allowable_inside": self.allowable_inside,
            "max_deviation_outside": self.max_deviation_outside,
            "max_deviation_inside": self.max_deviation_inside,
            "total_measured_zone": self.total_measured_zone,
            "tolerance_consumed": self.tolerance_consumed,
            "point_count": self.point_count,
            "non_conforming_points": list(self.non_conforming_points),
        }


def calculate_zone_boundaries(
    tolerance: float,
    zone_type: ProfileZoneType,
    outside_amount: Optional[float] = None,
) -> tuple[float, float]:
    """Allowable (outside, inside) deviation from the true profile."""
    if zone_type is ProfileZoneType.BILATERAL:
        return tolerance / 2.0, tolerance / 2.0
    if zone_type is ProfileZoneType.UNILATERAL_OUTSIDE:
        return tolerance, 0.0
    if zone_type is ProfileZoneType.UNILATERAL_INSIDE:
        return 0.0, tolerance
    if zone_type is ProfileZoneType.UNEQUALLY_DISPOSED:
        outside = tolerance / 2.0 if outside_amount is None else outside_amount
        return max(0.0, outside), max(0.0, tolerance - outside)
    raise ValueError(f"Unknown zone type: {zone_type!r}")


def _validate(inp: ProfileInput) -> list[CalculatorError]:
    errors: list[CalculatorError] = []
    err = precision_error(inp.precision)
    if err:
        errors.append(err)

    if inp.tolerance <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_TOLERANCE,
            "Profile tolerance must be greater than zero",
            "tolerance",
        ))
    if not inp.measured_points:
        errors.append(CalculatorError(
            ErrorCode.NO_MEASUREMENTS,
            "At least one measured point is required",
            "measured_points",
        ))
    if inp.zone_type is ProfileZoneType.UNEQUALLY_DISPOSED:
        if inp.outside_amount is None:
            errors.append(CalculatorError(
                ErrorCode.MISSING_OUTSIDE_AMOUNT,
                "Outside amount is required for unequally disposed zones",
                "outside_amount",
            ))
        elif not 0 <= inp.outside_amount <= inp.tolerance:
            errors.append(CalculatorError(
                ErrorCode.INVALID_OUTSIDE_AMOUNT,
                "Outside amount must be between 0 and total tolerance",
                "outside_amount",
            ))
    return errors


def calculate_profile(
    inp: ProfileInput,
    clock: Optional[Clock] = None,
) -> CalculatorResponse[ProfileResult]:
    """Evaluate each measured point against the profile zone."""
    errors = _validate(inp)
    if errors:
        logger.info("profile input rejected: %s", [e.code.value for e in errors])
        return CalculatorResponse.fail(errors)

    precision = inp.precision
    allow_out, allow_in = calculate_zone_boundaries(inp.tolerance, inp.zone_type,
                                                    inp.outside_amount)

    max_out = 0.0
    max_in = 0.0
    bad: list[int] = []
    for i, point in enumerate(inp.measured_points):
        if point.deviation > 0:
            max_out = max(max_out, point.deviation)
            if point.deviation > allow_out:
                bad.append(i)
        else:
            depth = abs(point.deviation)
            max_in = max(max_in, depth)
            if depth > allow_in:
                bad.append(i)

    max_out = round_half_up(max_out, precision)
    max_in = round_half_up(max_in, precision)
    measured_zone = round_half_up(max_out + max_in, precision)

    out_ratio = max_out / allow_out if allow_out > 0 else 0.0
    in_ratio = max_in / allow_in if allow_in > 0 else 0.0
    consumed = round_half_up(max(out_ratio, in_ratio) * 100.0, 1)

    passed = not bad
    status = status_from(passed)
    logger.debug("profile %s: %d of %d points out of zone",
                 status.value, len(bad), len(inp.measured_points))

    head = ("PASS: Profile tolerance satisfied." if passed
            else f"FAIL: Profile tolerance exceeded at {len(bad)} point(s).")
    control = "form only" if inp.form_only else "form, orientation and location"
    summary = " ".join([
        head,
        f"Zone type: {inp.zone_type.description}, controls {control}.",
        f"Max outside: {format_value(max_out)} (allowed: {format_value(allow_out)})",
        f"Max inside: {format_value(max_in)} (allowed: {format_value(allow_in)})",
    ])

    return CalculatorResponse.ok(ProfileResult(
        status=status,
        summary=summary,
        timestamp=timestamp(clock),
        unit=inp.unit,
        stated_tolerance=inp.tolerance,
        zone_type=inp.zone_type,
        allowable_outside=round_half_up(allow_out, precision),
        allowable_inside=round_half_up(allow_in, precision),
        max_deviation_outside=max_out,
        max_deviation_inside=max_in,
        total_measured_zone=measured_zone,
        tolerance_consumed=consumed,
        point_count=len(inp.measured_points),
        non_conforming_points=tuple(bad),
    ))


# ---------------------------------------------------------------------------
# Simplified call shapes
# ---------------------------------------------------------------------------

def create_envelope_points(max_outside: float, max_inside: float) -> list[ProfilePoint]:
    """Two-point stand-in for a report that only gives the deviation envelope."""
    return [ProfilePoint(0.0, max_outside), ProfilePoint(1.0, -max_inside)]


def total_to_bilateral(total_deviation: float) -> tuple[float, float]:
    """Split a total deviation evenly into (outside, inside)."""
    return total_deviation / 2.0, total_deviation / 2.0


def _quick(tolerance: float, zone_type: ProfileZoneType,
           points: list[ProfilePoint]) -> tuple[bool, float]:
    response = calculate_profile(ProfileInput(
        tolerance=tolerance, zone_type=zone_type,
        measured_points=points, precision=6,
    ))
    if not response.success:
        raise ValueError(response.errors[0].message)
    r = response.result
    return r.status is PassFailStatus.PASS, r.tolerance_consumed


def quick_profile_bilateral(
    max_deviation_outside: float,
    max_deviation_inside: float,
    tolerance: float,
) -> tuple[bool, float]:
    """(pass, percent consumed) for a bilateral zone from envelope values."""
    return _quick(tolerance, ProfileZoneType.BILATERAL,
                  create_envelope_points(max_deviation_outside, max_deviation_inside))


def quick_profile_unilateral(
    max_deviation: float,
    tolerance: float,
    direction: str = "outside",
) -> tuple[bool, float]:
    """(pass, percent consumed) for a unilateral zone on ``direction`` side."""
    if direction == "outside":
        return _quick(tolerance, ProfileZoneType.UNILATERAL_OUTSIDE,
                      [ProfilePoint(0.0, abs(max_deviation))])
    if direction == "inside":
        return _quick(tolerance, ProfileZoneType.UNILATERAL_INSIDE,
                      [ProfilePoint(0.0, -abs(max_deviation))])
    raise ValueError(f"direction must be 'outside' or 'inside', got {direction!r}")
