"""Tests for the tolcalc command-line interface."""

import json

import pytest

from tolerance_calc.cli import main
from tolerance_calc.examples import position_at_mmc_record


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return str(path)


class TestExampleCommand:
    @pytest.mark.parametrize("name", ["bearing", "bolt-pattern", "shaft", "position", "flatness"])
    def test_creates_file(self, tmp_path, capsys, name):
        path = str(tmp_path / f"{name}.json")
        main(["example", name, "-o", path])
        assert f"Created example: {path}" in capsys.readouterr().out
        with open(path) as f:
            assert json.load(f)


class TestAnalyzeCommand:
    def test_analyze_bearing(self, tmp_path, capsys):
        path = str(tmp_path / "bearing.json")
        main(["example", "bearing", "-o", path])
        capsys.readouterr()

        main(["analyze", path, "--pareto"])
        out = capsys.readouterr().out
        assert "=== worst-case stack-up ===" in out
        assert "Acceptance:       PASS" in out
        assert "Reported range:   0.0000 mm .. 0.0380 mm" in out
        assert "Pareto:" in out

    def test_method_override_and_json(self, tmp_path, capsys):
        path = str(tmp_path / "bearing.json")
        main(["example", "bearing", "-o", path])
        capsys.readouterr()

        main(["analyze", path, "-m", "rss", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["method"] == "rss"
        assert data["total_tolerance"] == pytest.approx(0.01409, abs=1e-5)

    def test_invalid_stack_exits(self, tmp_path, capsys):
        path = _write(tmp_path, "one.json", {
            "name": "One", "dimensions": [{"name": "A", "nominal": 1.0,
                                           "tolerance_plus": 0.1, "tolerance_minus": 0.1}],
        })
        with pytest.raises(SystemExit) as exc:
            main(["analyze", path])
        assert exc.value.code == 2
        assert "INSUFFICIENT_DIMENSIONS" in capsys.readouterr().err

    def test_bad_precision(self, tmp_path):
        path = str(tmp_path / "bolt.json")
        main(["example", "bolt-pattern", "-o", path])
        with pytest.raises(SystemExit) as exc:
            main(["analyze", path, "-p", "9"])
        assert exc.value.code == 2

    def test_warnings_to_stderr(self, tmp_path, capsys):
        path = str(tmp_path / "bolt.json")
        main(["example", "bolt-pattern", "-o", path])
        main(["analyze", path])
        assert "same sign" in capsys.readouterr().err


class TestCompareCommand:
    def test_all_methods(self, tmp_path, capsys):
        path = str(tmp_path / "shaft.json")
        main(["example", "shaft", "-o", path])
        capsys.readouterr()

        main(["compare", path])
        out = capsys.readouterr().out
        for name in ("worst-case", "rss", "six-sigma"):
            assert f"=== {name} stack-up ===" in out


class TestCheckCommand:
    def test_position_pass(self, tmp_path, capsys):
        path = _write(tmp_path, "pos.json", position_at_mmc_record())
        main(["check", path])
        assert capsys.readouterr().out.startswith("PASS: Position tolerance satisfied.")

    def test_position_fail_exit_code(self, tmp_path):
        record = position_at_mmc_record()
        record["measured"]["actual_x"] = 25.3
        path = _write(tmp_path, "pos.json", record)
        with pytest.raises(SystemExit) as exc:
            main(["check", path])
        assert exc.value.code == 1

    def test_explicit_characteristic(self, tmp_path, capsys):
        path = _write(tmp_path, "perp.json", {
            "tolerance": 0.05, "feature_type": "surface", "linear_deviation": 0.03,
        })
        main(["check", path, "-c", "perpendicularity", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["result"]["tolerance_consumed"] == 60.0

    def test_precision_flag(self, tmp_path, capsys):
        path = _write(tmp_path, "flat.json", {
            "characteristic": "flatness", "tolerance": 0.05, "total_indicator_reading": 0.0123,
        })
        main(["check", path, "-p", "2", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["result"]["measured_flatness"] == 0.01

    def test_validation_errors(self, tmp_path, capsys):
        path = _write(tmp_path, "flat.json", {"characteristic": "flatness", "tolerance": 0.0})
        with pytest.raises(SystemExit) as exc:
            main(["check", path])
        assert exc.value.code == 2
        err = capsys.readouterr().err
        assert "INVALID_TOLERANCE" in err
        assert "NO_MEASUREMENTS" in err

    def test_unknown_characteristic(self, tmp_path, capsys):
        path = _write(tmp_path, "x.json", {"characteristic": "runout"})
        with pytest.raises(SystemExit) as exc:
            main(["check", path])
        assert exc.value.code == 2
        assert "Unknown characteristic" in capsys.readouterr().err

    def test_malformed_document(self, tmp_path, capsys):
        path = _write(tmp_path, "pos.json", {"characteristic": "position"})
        with pytest.raises(SystemExit) as exc:
            main(["check", path])
        assert exc.value.code == 2
        assert "Invalid input document" in capsys.readouterr().err


class TestNoCommand:
    def test_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "tolcalc" in capsys.readouterr().out
