"""Tests for the position calculator."""

from datetime import datetime, timezone

import pytest

from tolerance_calc.examples import position_at_mmc_record
from tolerance_calc.gdt import FeatureType, MaterialCondition, SizeDimension
from tolerance_calc.position import (
    MeasuredPosition, PositionInput, TruePosition,
    calculate_position, calculate_position_deviation,
    quick_position_lmc, quick_position_mmc, quick_position_rfs,
)
from tolerance_calc.results import ErrorCode, PassFailStatus

FIXED = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _clock():
    return FIXED


def _hole_input(actual_size=10.1, x=25.05, y=40.05, mc=MaterialCondition.MMC, **kw):
    """Ø0.2 position on a Ø10.0 +0.2/-0.0 hole at (25, 40)."""
    return PositionInput(
        geometric_tolerance=kw.pop("tolerance", 0.2),
        material_condition=mc,
        feature_type=kw.pop("feature_type", FeatureType.HOLE),
        size_dimension=kw.pop("size_dimension",
                              SizeDimension(10.0, 0.2, 0.0, FeatureType.HOLE)),
        true_position=TruePosition(25.0, 40.0, kw.pop("basic_z", None)),
        measured=MeasuredPosition(x, y, actual_size, kw.pop("actual_z", None)),
        **kw,
    )


class TestPositionDeviation:
    def test_diametral(self):
        dev = calculate_position_deviation(25.05, 40.05, 25.0, 40.0)
        assert dev.dx == 0.05
        assert dev.dy == 0.05
        assert dev.dz is None
        assert dev.radial == 0.0707
        assert dev.actual_position == 0.1414

    def test_planar(self):
        dev = calculate_position_deviation(3.0, 4.0, 0.0, 0.0, diametral=False)
        assert dev.radial == 5.0
        assert dev.actual_position == 5.0

    def test_z_needs_both(self):
        dev = calculate_position_deviation(0.0, 0.0, 0.0, 0.0, actual_z=1.0)
        assert dev.dz is None
        assert dev.radial == 0.0

    def test_three_dimensional(self):
        dev = calculate_position_deviation(1.0, 2.0, 0.0, 0.0, actual_z=2.0, basic_z=0.0)
        assert dev.dz == 2.0
        assert dev.radial == 3.0
        assert dev.actual_position == 6.0


class TestCalculatePosition:
    def test_mmc_with_bonus_passes(self):
        resp = calculate_position(_hole_input(), clock=_clock)
        assert resp.success
        r = resp.result
        assert r.status is PassFailStatus.PASS
        assert r.bonus_tolerance == 0.1
        assert r.total_allowable_tolerance == 0.3
        assert r.radial_deviation == 0.0707
        assert r.actual_position_tolerance == 0.1414
        assert r.tolerance_consumed == 47.1
        assert r.size_conformance
        assert r.position_conformance
        assert r.virtual_condition == 9.8
        assert r.resultant_condition == 10.4
        assert r.timestamp == FIXED.isoformat()

    def test_summary(self):
        r = calculate_position(_hole_input(), clock=_clock).result
        assert r.summary.startswith("PASS: Position tolerance satisfied.")
        assert "Actual position: Ø0.1414 vs Allowable: Ø0.3000" in r.summary
        assert "Bonus tolerance: 0.1000 (MMC)" in r.summary

    def test_location_fail(self):
        r = calculate_position(_hole_input(actual_size=10.0, x=25.2, y=40.0)).result
        assert r.status is PassFailStatus.FAIL
        assert r.bonus_tolerance == 0.0
        assert r.actual_position_tolerance == 0.4
        assert not r.position_conformance
        assert r.size_conformance
        assert r.summary.startswith("FAIL: Position tolerance exceeded.")
        assert "exceeds total allowable tolerance" in r.summary

    def test_oversize_fails_on_size(self):
        r = calculate_position(_hole_input(actual_size=10.3)).result
        assert r.status is PassFailStatus.FAIL
        assert not r.size_conformance
        assert r.position_conformance
        assert r.bonus_tolerance == 0.3
        assert "WARNING: Actual size is outside size limits." in r.summary

    def test_undersize_gets_no_bonus(self):
        r = calculate_position(_hole_input(actual_size=9.9)).result
        assert r.bonus_tolerance == 0.0
        assert r.total_allowable_tolerance == 0.2
        assert not r.size_conformance

    def test_lmc(self):
        r = calculate_position(_hole_input(actual_size=10.05, mc=MaterialCondition.LMC)).result
        assert r.bonus_tolerance == 0.15
        assert r.total_allowable_tolerance == 0.35
        assert r.virtual_condition == 10.4

    def test_rfs_reference_boundaries(self):
        r = calculate_position(_hole_input(mc=MaterialCondition.RFS)).result
        assert r.bonus_tolerance == 0.0
        assert r.virtual_condition == 10.0
        assert r.resultant_condition == 10.2
        assert "Bonus" not in r.summary

    def test_external_feature(self):
        pin = SizeDimension(10.0, 0.0, 0.1, FeatureType.PIN)
        r = calculate_position(_hole_input(
            actual_size=9.95, feature_type=FeatureType.PIN, size_dimension=pin,
        )).result
        assert r.bonus_tolerance == 0.05
        assert r.virtual_condition == 10.2

    def test_planar_zone(self):
        r = calculate_position(_hole_input(diametral_zone=False)).result
        assert r.actual_position_tolerance == r.radial_deviation
        assert "Ø" not in r.summary

    def test_z_component(self):
        r = calculate_position(_hole_input(x=25.0, y=40.0, basic_z=5.0, actual_z=5.1)).result
        assert r.deviation_z == 0.1
        assert r.actual_position_tolerance == 0.2

    def test_default_timestamp_is_utc(self):
        r = calculate_position(_hole_input()).result
        assert datetime.fromisoformat(r.timestamp).tzinfo is not None

    def test_to_dict(self):
        d = calculate_position(_hole_input(), clock=_clock).to_dict()
        assert d["success"] is True
        assert d["result"]["status"] == "pass"
        assert d["result"]["material_condition"] == "mmc"
        assert d["result"]["size_limits"]["mmc"] == 10.0

    def test_from_dict(self):
        inp = PositionInput.from_dict(position_at_mmc_record())
        r = calculate_position(inp).result
        assert r.total_allowable_tolerance == 0.3
        assert r.actual_position_tolerance == 0.1414


class TestPositionValidation:
    def test_zero_tolerance(self):
        resp = calculate_position(_hole_input(tolerance=0.0))
        assert not resp.success
        assert resp.result is None
        assert resp.error_codes == [ErrorCode.INVALID_TOLERANCE]
        assert resp.errors[0].field == "geometric_tolerance"

    def test_collects_all_errors(self):
        resp = calculate_position(_hole_input(
            tolerance=-1.0,
            actual_size=0.0,
            size_dimension=SizeDimension(-5.0, -0.1, 0.0, FeatureType.HOLE),
            precision=9,
        ))
        assert set(resp.error_codes) == {
            ErrorCode.INVALID_TOLERANCE,
            ErrorCode.INVALID_SIZE,
            ErrorCode.INVALID_SIZE_TOLERANCE,
            ErrorCode.INVALID_ACTUAL_SIZE,
            ErrorCode.INVALID_PRECISION,
        }

    def test_surface_with_modifier(self):
        resp = calculate_position(_hole_input(
            feature_type=FeatureType.SURFACE,
            size_dimension=SizeDimension(10.0, 0.2, 0.0, FeatureType.SURFACE),
        ))
        assert resp.error_codes == [ErrorCode.INVALID_FEATURE_TYPE]
        assert resp.errors[0].field == "feature_type"

    def test_surface_at_rfs_allowed(self):
        resp = calculate_position(_hole_input(
            feature_type=FeatureType.SURFACE,
            size_dimension=SizeDimension(10.0, 0.2, 0.0, FeatureType.SURFACE),
            mc=MaterialCondition.RFS,
        ))
        assert resp.success

    def test_size_dimension_of_other_class(self):
        """A hole toleranced with a pin's size callout is rejected."""
        resp = calculate_position(_hole_input(
            size_dimension=SizeDimension(10.0, 0.0, 0.1, FeatureType.PIN),
        ))
        assert resp.error_codes == [ErrorCode.INVALID_FEATURE_TYPE]
        assert resp.errors[0].field == "size_dimension.feature_type"

    def test_same_class_size_dimension_accepted(self):
        resp = calculate_position(_hole_input(
            size_dimension=SizeDimension(10.0, 0.2, 0.0, FeatureType.SLOT),
        ))
        assert resp.success

    def test_tolerance_rounding_to_zero(self):
        """0.04 at one decimal reports an allowable of 0.0 without dividing by it."""
        resp = calculate_position(_hole_input(
            tolerance=0.04, actual_size=10.0, x=25.0, y=40.0, precision=1,
        ))
        assert resp.success
        r = resp.result
        assert r.total_allowable_tolerance == 0.0
        assert r.actual_position_tolerance == 0.0
        assert r.tolerance_consumed == 0.0
        assert r.status is PassFailStatus.PASS

    def test_failed_response_to_dict(self):
        d = calculate_position(_hole_input(tolerance=0.0)).to_dict()
        assert d == {
            "success": False,
            "errors": [{
                "code": "INVALID_TOLERANCE",
                "message": "Geometric tolerance must be greater than zero",
                "field": "geometric_tolerance",
            }],
        }


class TestQuickPosition:
    def test_mmc(self):
        q = quick_position_mmc(0.2, 10.0, 10.1, 0.05, 0.05)
        assert q.passed
        assert q.bonus == pytest.approx(0.1)
        assert q.total_tolerance == pytest.approx(0.3)
        assert q.actual_position == pytest.approx(0.141421)

    def test_lmc(self):
        q = quick_position_lmc(0.2, 10.2, 10.05, 0.0, 0.0)
        assert q.bonus == pytest.approx(0.15)
        assert q.passed

    def test_rfs(self):
        q = quick_position_rfs(0.1, 0.05, 0.05)
        assert q.bonus == 0.0
        assert not q.passed
