"""Flatness tolerance calculator.

Flatness is a form tolerance: the zone is two parallel planes separated by
the tolerance value. It never takes a datum or a material condition
modifier. Measured flatness comes either from a total indicator reading
(TIR) or from a point cloud referenced to a least-squares plane.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from tolerance_calc.results import (
    CalculatorError, CalculatorResponse, Clock, ErrorCode, PassFailStatus,
    Unit, precision_error, status_from, timestamp,
)
from tolerance_calc.rounding import DEFAULT_PRECISION, format_value, round_half_up

logger = logging.getLogger(__name__)

# Cofactor determinants below this are treated as a degenerate (collinear) cloud
_DEGENERATE_DET = 1e-24


@dataclass(frozen=True)
class SurfacePoint:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Plane:
    """Plane a*x + b*y + c*z + d = 0 with unit normal (a, b, c)."""
    a: float
    b: float
    c: float
    d: float

    @property
    def normal(self) -> tuple[float, float, float]:
        return (self.a, self.b, self.c)


@dataclass
class FlatnessInput:
    """Input for a flatness evaluation.

    Attributes:
        tolerance: Stated flatness tolerance (zone width).
        measured_points: Surface points from inspection.
        total_indicator_reading: Pre-reduced TIR; used instead of the
            point cloud when given.
        unit: Unit of all lengths.
        precision: Output rounding, 1-6 decimals.
    """
    tolerance: float
    measured_points: list[SurfacePoint] = field(default_factory=list)
    total_indicator_reading: Optional[float] = None
    unit: Unit = Unit.MM
    precision: int = DEFAULT_PRECISION

    @classmethod
    def from_dict(cls, d: dict) -> FlatnessInput:
        return cls(
            tolerance=d["tolerance"],
            measured_points=[SurfacePoint(p["x"], p["y"], p["z"])
                             for p in d.get("measured_points", [])],
            total_indicator_reading=d.get("total_indicator_reading"),
            unit=Unit(d.get("unit", "mm")),
            precision=d.get("precision", DEFAULT_PRECISION),
        )


@dataclass(frozen=True)
class FlatnessResult:
    """Outcome of a flatness evaluation."""
    status: PassFailStatus
    summary: str
    timestamp: str
    unit: Unit
    stated_tolerance: float
    measured_flatness: float
    max_deviation: float
    min_deviation: float
    total_zone_width: float
    tolerance_consumed: float
    point_count: int

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "summary": self.summary,
            "timestamp": self.timestamp,
            "unit": self.unit.value,
            "stated_tolerance": self.stated_tolerance,
            "measured_flatness": self.measured_flatness,
            "max_deviation": self.max_deviation,
            "min_deviation": self.min_deviation,
            "total_zone_width": self.total_zone_width,
            "tolerance_consumed": self.tolerance_consumed,
            "point_count": self.point_count,
        }


def _as_array(points: list[SurfacePoint]) -> np.ndarray:
    return np.array([[p.x, p.y, p.z] for p in points], dtype=float).reshape(-1, 3)


def fit_plane(points: list[SurfacePoint]) -> Plane:
    """Least-squares reference plane through a point cloud.

    The covariance matrix of the centred points is reduced in closed form:
    the axis whose 2x2 cofactor determinant is largest is taken as the
    dominant normal direction, which keeps the solution well conditioned for
    surfaces in any orientation. With fewer than three points, or a cloud
    with no spread in two directions, a horizontal plane through the mean z
    is returned.
    """
    pts = _as_array(points)
    if len(pts) == 0:
        raise ValueError("cannot fit a plane to zero points")

    centroid = pts.mean(axis=0)
    if len(pts) < 3:
        return Plane(0.0, 0.0, 1.0, -float(centroid[2]))

    centred = pts - centroid
    cov = centred.T @ centred
    xx, xy, xz = cov[0]
    yy, yz = cov[1, 1], cov[1, 2]
    zz = cov[2, 2]

    det_x = yy * zz - yz * yz
    det_y = xx * zz - xz * xz
    det_z = xx * yy - xy * xy

    if max(det_x, det_y, det_z) <= _DEGENERATE_DET:
        logger.debug("degenerate point cloud (%d points); using horizontal plane", len(pts))
        return Plane(0.0, 0.0, 1.0, -float(centroid[2]))

    if det_z >= det_x and det_z >= det_y:
        normal = np.array([(xy * yz - xz * yy) / det_z, (xy * xz - yz * xx) / det_z, 1.0])
    elif det_y >= det_x:
        normal = np.array([(xz * yz - xy * zz) / det_y, 1.0, (xy * xz - yz * xx) / det_y])
    else:
        normal = np.array([1.0, (xz * yz - xy * zz) / det_x, (xy * yz - xz * yy) / det_x])

    normal = normal / np.linalg.norm(normal)
    d = -float(np.dot(normal, centroid))
    return Plane(float(normal[0]), float(normal[1]), float(normal[2]), d)


def plane_deviations(points: list[SurfacePoint], plane: Plane) -> np.ndarray:
    """Signed distance of each point to ``plane`` (positive along the normal)."""
    pts = _as_array(points)
    return pts @ np.array(plane.normal) + plane.d


def _validate(inp: FlatnessInput) -> list[CalculatorError]:
    errors: list[CalculatorError] = []
    err = precision_error(inp.precision)
    if err:
        errors.append(err)

    if inp.tolerance <= 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_TOLERANCE,
            "Flatness tolerance must be greater than zero",
            "tolerance",
        ))
    if not inp.measured_points and inp.total_indicator_reading is None:
        errors.append(CalculatorError(
            ErrorCode.NO_MEASUREMENTS,
            "Either measured points or total indicator reading must be provided",
            "measured_points",
        ))
    if inp.total_indicator_reading is not None and inp.total_indicator_reading < 0:
        errors.append(CalculatorError(
            ErrorCode.INVALID_TIR,
            "Total indicator reading cannot be negative",
            "total_indicator_reading",
        ))
    return errors


def calculate_flatness(
    inp: FlatnessInput,
    clock: Optional[Clock] = None,
) -> CalculatorResponse[FlatnessResult]:
    """Evaluate flatness conformance from a TIR or a point cloud."""
    errors = _validate(inp)
    if errors:
        logger.info("flatness input rejected: %s", [e.code.value for e in errors])
        return CalculatorResponse.fail(errors)

    precision = inp.precision

    if inp.total_indicator_reading is not None:
        tir = inp.total_indicator_reading
        flatness, max_dev, min_dev = tir, tir / 2.0, -tir / 2.0
    else:
        devs = plane_deviations(inp.measured_points, fit_plane(inp.measured_points))
        max_dev = float(devs.max())
        min_dev = float(devs.min())
        flatness = max_dev - min_dev

    flatness = round_half_up(flatness, precision)
    max_dev = round_half_up(max_dev, precision)
    min_dev = round_half_up(min_dev, precision)
    zone = round_half_up(max_dev - min_dev, precision)

    passed = flatness <= inp.tolerance
    consumed = round_half_up(flatness / inp.tolerance * 100.0, 1)
    status = status_from(passed)
    logger.debug("flatness %s: measured=%s tolerance=%s", status.value, flatness, inp.tolerance)

    if passed:
        summary = (f"PASS: Flatness {format_value(flatness)} is within tolerance "
                   f"{format_value(inp.tolerance)} ({consumed:.1f}% consumed)")
    else:
        summary = (f"FAIL: Flatness {format_value(flatness)} exceeds tolerance "
                   f"{format_value(inp.tolerance)} ({consumed:.1f}% consumed)")

    return CalculatorResponse.ok(FlatnessResult(
        status=status,
        summary=summary,
        timestamp=timestamp(clock),
        unit=inp.unit,
        stated_tolerance=inp.tolerance,
        measured_flatness=flatness,
        max_deviation=max_dev,
        min_deviation=min_dev,
        total_zone_width=zone,
        tolerance_consumed=consumed,
        point_count=len(inp.measured_points),
    ))


# ---------------------------------------------------------------------------
# Simplified call shapes
# ---------------------------------------------------------------------------

def quick_flatness(total_indicator_reading: float, tolerance: float) -> tuple[bool, float]:
    """(pass, percent consumed) for a TIR against a tolerance."""
    response = calculate_flatness(FlatnessInput(
        tolerance=tolerance,
        total_indicator_reading=total_indicator_reading,
        precision=6,
    ))
    if not response.success:
        raise ValueError(response.errors[0].message)
    r = response.result
    return r.status is PassFailStatus.PASS, r.tolerance_consumed


def flatness_from_min_max(
    min_deviation: float,
    max_deviation: float,
    tolerance: float,
) -> tuple[float, bool]:
    """(flatness, pass) from the extreme deviations of an inspection report."""
    passed, _ = quick_flatness(max_deviation - min_deviation, tolerance)
    return round_half_up(max_deviation - min_deviation, 6), passed
