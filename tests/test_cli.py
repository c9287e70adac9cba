"""
Tests for the softener-sizer command-line interface.
"""
import json

import pytest

from softener_tools.cli import build_parser, load_input_file, main, parse_overrides, run_sizing
from softener_tools.exceptions import InvalidSizingInputError


SCENARIO_1_ARGS = [
    "--set", "hardness_value=300",
    "--set", "gallons_per_day=10000",
    "--set", "days_between_regen=2",
    "--set", "peak_flow_gpm=50",
]


@pytest.mark.cli
class TestParseOverrides:

    def test_pairs(self):
        assert parse_overrides(["hardness_value=300", "hardnessUnits=gpg"]) == {
            "hardness_value": "300",
            "hardnessUnits": "gpg",
        }

    def test_empty_value_clears_field(self):
        assert parse_overrides(["reserve_percent="]) == {"reserve_percent": ""}

    def test_value_may_contain_equals(self):
        assert parse_overrides(["hardness_units=a=b"]) == {"hardness_units": "a=b"}

    @pytest.mark.parametrize("pair", ["hardness_value", "=300", " =1"])
    def test_invalid_pair(self, pair):
        with pytest.raises(InvalidSizingInputError):
            parse_overrides([pair])


@pytest.mark.cli
class TestLoadInputFile:

    def test_loads_object(self, tmp_path, scenario_1_raw):
        path = tmp_path / "inputs.json"
        path.write_text(json.dumps(scenario_1_raw), encoding="utf-8")

        assert load_input_file(str(path)) == scenario_1_raw

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "inputs.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidSizingInputError, match="Invalid JSON"):
            load_input_file(str(path))

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "inputs.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(InvalidSizingInputError, match="must contain a JSON object"):
            load_input_file(str(path))


@pytest.mark.cli
class TestRunSizing:

    def test_summary(self, scenario_1_raw):
        text = run_sizing(scenario_1_raw, "summary")
        assert "Resin volume: 18.35 ft³" in text

    def test_json(self, scenario_1_raw):
        report = json.loads(run_sizing(scenario_1_raw, "json"))

        assert report["status"] == "complete"
        assert report["inputs"]["hardness_value"] == 300.0

    def test_markdown(self, scenario_1_raw):
        text = run_sizing(scenario_1_raw, "markdown")
        assert text.startswith("# Industrial Water Softener Sizer Summary")


@pytest.mark.cli
class TestMain:
    """End-to-end CLI runs."""

    def test_parser_defaults(self):
        args = build_parser().parse_args([])

        assert args.format == "json"
        assert args.overrides == []
        assert args.input is None

    def test_summary_to_stdout(self, capsys):
        exit_code = main(SCENARIO_1_ARGS + ["--format", "summary"])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Design hardness: 17.54 grains per gallon" in out
        assert "Minimum tank diameter estimate: 36.19 in" in out

    def test_set_overrides_input_file(self, tmp_path, scenario_1_raw, capsys):
        path = tmp_path / "inputs.json"
        path.write_text(json.dumps(scenario_1_raw), encoding="utf-8")

        exit_code = main(["--input", str(path), "--set", "reserve_percent=100"])

        assert exit_code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["status"] == "blocked"
        assert report["result"]["reserve_too_high"] is True

    def test_set_overrides_camel_case_file(self, tmp_path, capsys):
        path = tmp_path / "inputs.json"
        path.write_text(json.dumps({
            "hardnessValue": "300",
            "hardnessUnits": "ppm_as_caco3",
            "gallonsPerDay": "10000",
            "daysBetweenRegen": "2",
            "peakFlowGpm": "50",
        }), encoding="utf-8")

        exit_code = main([
            "--input", str(path), "--set", "hardness_value=10", "--set", "hardness_units=gpg",
        ])

        assert exit_code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["inputs"]["hardness_value"] == 10.0
        assert report["inputs"]["hardness_units"] == "gpg"
        assert report["result"]["hardness_gpg"]["value"] == 10.0

    def test_output_file(self, tmp_path):
        output = tmp_path / "out" / "report.md"

        exit_code = main(SCENARIO_1_ARGS + ["--format", "markdown", "--output", str(output)])

        assert exit_code == 0
        assert "## Sizing Steps" in output.read_text(encoding="utf-8")

    def test_bad_override_exit_code(self, capsys):
        exit_code = main(["--set", "hardness_value"])

        assert exit_code == 2
        assert "InvalidSizingInputError" in capsys.readouterr().err

    def test_invalid_salt_dose(self, capsys):
        exit_code = main(SCENARIO_1_ARGS + ["--set", "salt_dose=7"])

        assert exit_code == 2
        err = capsys.readouterr().err
        assert "invalid_fields" in err
        assert "salt_dose" in err

    def test_overflowing_inputs(self, capsys):
        exit_code = main([
            "--set", "hardness_value=1e200", "--set", "hardness_units=gpg",
            "--set", "gallons_per_day=1e200", "--set", "days_between_regen=2",
            "--set", "peak_flow_gpm=50", "--format", "summary",
        ])

        assert exit_code == 0
        assert "Resin volume: ∞ ft³" in capsys.readouterr().out

    def test_missing_input_file(self, tmp_path):
        assert main(["--input", str(tmp_path / "missing.json")]) == 2


@pytest.mark.cli
class TestExampleUsage:

    def test_example_runs(self, capsys):
        from examples.example_usage import example_softener_sizing

        example_softener_sizing()

        out = capsys.readouterr().out
        assert "Step 5: Reserve Capacity must be below 100%" in out
        assert "Report status: complete" in out
