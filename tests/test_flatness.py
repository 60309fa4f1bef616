"""Tests for the flatness calculator and reference-plane fit."""

from datetime import datetime, timezone

import numpy as np
import pytest

from tolerance_calc.examples import flatness_record
from tolerance_calc.flatness import (
    FlatnessInput, SurfacePoint, calculate_flatness, fit_plane,
    flatness_from_min_max, plane_deviations, quick_flatness,
)
from tolerance_calc.results import ErrorCode, PassFailStatus

FIXED = datetime(2026, 3, 2, 8, 30, tzinfo=timezone.utc)


def _grid(fn, span=100.0):
    """3x3 grid over [0, span] in two coordinates, third from ``fn(u, v)``."""
    step = span / 2.0
    return [(i * step, j * step, fn(i * step, j * step)) for j in range(3) for i in range(3)]


def _xy_grid(z_of):
    return [SurfacePoint(u, v, w) for u, v, w in _grid(z_of)]


class TestFitPlane:
    def test_horizontal(self):
        plane = fit_plane(_xy_grid(lambda x, y: 5.0))
        assert plane.normal == pytest.approx((0.0, 0.0, 1.0))
        assert plane.d == pytest.approx(-5.0)

    def test_tilted_z_dominant(self):
        pts = _xy_grid(lambda x, y: 0.001 * x + 0.002 * y + 5.0)
        devs = plane_deviations(pts, fit_plane(pts))
        assert np.abs(devs).max() == pytest.approx(0.0, abs=1e-9)

    def test_tilted_y_dominant(self):
        """Surface roughly parallel to the XZ plane."""
        pts = [SurfacePoint(u, 0.01 * u + 0.02 * w + 1.0, w) for u, w, _ in _grid(lambda a, b: 0)]
        plane = fit_plane(pts)
        assert abs(plane.b) > abs(plane.a)
        assert abs(plane.b) > abs(plane.c)
        devs = plane_deviations(pts, plane)
        assert np.abs(devs).max() == pytest.approx(0.0, abs=1e-9)

    def test_tilted_x_dominant(self):
        """Surface roughly parallel to the YZ plane."""
        pts = [SurfacePoint(0.01 * v + 0.02 * w + 3.0, v, w) for v, w, _ in _grid(lambda a, b: 0)]
        plane = fit_plane(pts)
        assert abs(plane.a) > abs(plane.b)
        devs = plane_deviations(pts, plane)
        assert np.abs(devs).max() == pytest.approx(0.0, abs=1e-9)

    def test_unit_normal(self):
        plane = fit_plane(_xy_grid(lambda x, y: 0.3 * x - 0.1 * y))
        assert np.linalg.norm(plane.normal) == pytest.approx(1.0)

    def test_two_points_horizontal_through_mean(self):
        plane = fit_plane([SurfacePoint(0, 0, 1.0), SurfacePoint(10, 0, 3.0)])
        assert plane.normal == (0.0, 0.0, 1.0)
        assert plane.d == pytest.approx(-2.0)

    def test_collinear_points_horizontal(self):
        pts = [SurfacePoint(float(i), 0.0, 0.0) for i in range(5)]
        plane = fit_plane(pts)
        assert plane.normal == (0.0, 0.0, 1.0)

    def test_no_points(self):
        with pytest.raises(ValueError, match="zero points"):
            fit_plane([])


class TestCalculateFlatness:
    def test_tir(self):
        resp = calculate_flatness(FlatnessInput(tolerance=0.05, total_indicator_reading=0.03),
                                  clock=lambda: FIXED)
        r = resp.result
        assert r.status is PassFailStatus.PASS
        assert r.measured_flatness == 0.03
        assert r.max_deviation == 0.015
        assert r.min_deviation == -0.015
        assert r.total_zone_width == 0.03
        assert r.tolerance_consumed == 60.0
        assert r.point_count == 0
        assert r.timestamp == FIXED.isoformat()
        assert r.summary == "PASS: Flatness 0.0300 is within tolerance 0.0500 (60.0% consumed)"

    def test_tir_fail(self):
        r = calculate_flatness(FlatnessInput(tolerance=0.05, total_indicator_reading=0.06)).result
        assert r.status is PassFailStatus.FAIL
        assert r.tolerance_consumed == 120.0
        assert r.summary.startswith("FAIL: Flatness 0.0600 exceeds tolerance 0.0500")

    def test_tir_takes_precedence(self):
        pts = _xy_grid(lambda x, y: 1.0 if x == 50.0 and y == 50.0 else 0.0)
        r = calculate_flatness(FlatnessInput(
            tolerance=0.05, measured_points=pts, total_indicator_reading=0.01,
        )).result
        assert r.measured_flatness == 0.01
        assert r.point_count == 9

    def test_exactly_at_tolerance_passes(self):
        r = calculate_flatness(FlatnessInput(tolerance=0.05, total_indicator_reading=0.05)).result
        assert r.status is PassFailStatus.PASS
        assert r.tolerance_consumed == 100.0

    def test_point_cloud_centre_bump(self):
        pts = _xy_grid(lambda x, y: 0.009 if x == 50.0 and y == 50.0 else 0.0)
        r = calculate_flatness(FlatnessInput(tolerance=0.01, measured_points=pts)).result
        assert r.measured_flatness == 0.009
        assert r.max_deviation == 0.008
        assert r.min_deviation == -0.001
        assert r.tolerance_consumed == 90.0
        assert r.status is PassFailStatus.PASS

    def test_tilted_perfect_plane(self):
        pts = _xy_grid(lambda x, y: 0.002 * x - 0.001 * y + 12.0)
        r = calculate_flatness(FlatnessInput(tolerance=0.01, measured_points=pts)).result
        assert r.measured_flatness == 0.0
        assert r.tolerance_consumed == 0.0

    def test_two_points(self):
        r = calculate_flatness(FlatnessInput(
            tolerance=0.5,
            measured_points=[SurfacePoint(0, 0, 1.0), SurfacePoint(10, 0, 3.0)],
        )).result
        assert r.measured_flatness == 2.0
        assert r.status is PassFailStatus.FAIL
        assert r.tolerance_consumed == 400.0

    def test_from_dict(self):
        inp = FlatnessInput.from_dict(flatness_record())
        assert len(inp.measured_points) == 9
        assert calculate_flatness(inp).success


class TestFlatnessValidation:
    def test_no_measurements(self):
        resp = calculate_flatness(FlatnessInput(tolerance=0.05))
        assert resp.error_codes == [ErrorCode.NO_MEASUREMENTS]

    def test_negative_tir(self):
        resp = calculate_flatness(FlatnessInput(tolerance=0.05, total_indicator_reading=-0.01))
        assert resp.error_codes == [ErrorCode.INVALID_TIR]

    def test_collects_all_errors(self):
        resp = calculate_flatness(FlatnessInput(tolerance=0.0, precision=0))
        assert set(resp.error_codes) == {
            ErrorCode.INVALID_TOLERANCE, ErrorCode.NO_MEASUREMENTS, ErrorCode.INVALID_PRECISION,
        }


class TestQuickFlatness:
    def test_quick(self):
        assert quick_flatness(0.02, 0.05) == (True, 40.0)

    def test_quick_invalid(self):
        with pytest.raises(ValueError, match="negative"):
            quick_flatness(-0.01, 0.05)

    def test_from_min_max(self):
        flatness, passed = flatness_from_min_max(-0.01, 0.02, 0.05)
        assert flatness == pytest.approx(0.03)
        assert passed

    def test_from_min_max_fail(self):
        _, passed = flatness_from_min_max(-0.04, 0.04, 0.05)
        assert not passed
