"""
Scenario File Tests

- YAML parsing with schedule lookup and explicit diameters
- Running the network solve and the freeze verdict
- CSV export of profiles and sensitivity summaries
- Errors for missing files, sections and fields
"""

import pytest
import yaml

from pipe_freeze_risk.errors import ReferenceDataMissing
from pipe_freeze_risk.scenario import ScenarioCase

WINTER_LINE = dict(
    name="winter-line",
    pipe=dict(material="steel", schedule="40", nps=2, length=300),
    fluid=dict(T_in=10, P=3, flow_m3_per_hr=7.2),
    ambient=dict(T_amb=-27, V_wind_kmh=20),
    settings=dict(sampling_points=20, bound_max_iterations=8),
)


def write_case(tmp_path, data, name="case.yaml"):
    path = tmp_path / name
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return path


# ==================== FIXTURES ====================

@pytest.fixture
def case(tmp_path):
    return ScenarioCase(write_case(tmp_path, WINTER_LINE))


# ==================== PARSING ====================

class TestParsing:

    def test_schedule_lookup(self, case):
        assert case.name == "winter-line"
        assert case.config.geometry.D_outer == pytest.approx(0.0603)
        assert case.config.geometry.D_inner == pytest.approx(0.0525, abs=1e-4)
        assert case.config.geometry.roughness == pytest.approx(0.045e-3)
        assert case.config.num_segments == 60
        assert case.settings.sampling_points == 20

    def test_explicit_diameters_and_insulation(self, tmp_path):
        data = dict(WINTER_LINE, name="lagged",
                    pipe=dict(material="steel", D_inner=0.0525, D_outer=0.0603, roughness=1e-4, length=50),
                    insulation=dict(material="mineral_wool", thickness_mm=30))
        case = ScenarioCase(write_case(tmp_path, data))
        assert case.config.geometry.roughness == pytest.approx(1e-4)
        assert case.config.has_insulation
        assert case.config.insulation.thickness == pytest.approx(0.03)

    def test_name_defaults_to_file_stem(self, tmp_path):
        data = {k: v for k, v in WINTER_LINE.items() if k != "name"}
        assert ScenarioCase(write_case(tmp_path, data, "north-yard.yaml")).name == "north-yard"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScenarioCase(tmp_path / "absent.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            ScenarioCase(path)

    def test_missing_section(self, tmp_path):
        data = {k: v for k, v in WINTER_LINE.items() if k != "ambient"}
        with pytest.raises(ValueError, match="ambient"):
            ScenarioCase(write_case(tmp_path, data))

    def test_missing_field(self, tmp_path):
        data = dict(WINTER_LINE, fluid=dict(T_in=10, P=3))
        with pytest.raises(ValueError, match="flow_m3_per_hr"):
            ScenarioCase(write_case(tmp_path, data))

    def test_missing_pipe_size(self, tmp_path):
        data = dict(WINTER_LINE, pipe=dict(material="steel", length=300))
        with pytest.raises(ValueError):
            ScenarioCase(write_case(tmp_path, data))

    def test_unknown_schedule(self, tmp_path):
        data = dict(WINTER_LINE, pipe=dict(material="steel", schedule="160", nps=2, length=300))
        with pytest.raises(ReferenceDataMissing):
            ScenarioCase(write_case(tmp_path, data))


# ==================== RUNNING AND EXPORT ====================

class TestRun:

    def test_run_and_verdict(self, case, capsys):
        result = case.run()
        assert case.last_result is result
        assert -0.5 <= result.T_final < 3.0

        analysis = case.freeze_analysis()
        assert analysis["severity"] in ("warning", "critical")
        assert "winter-line" in capsys.readouterr().out

    def test_freeze_analysis_runs_solve(self, case):
        analysis = case.freeze_analysis(safety_margin=0.5)
        assert case.last_result is not None
        assert analysis["margin_to_safety"] == pytest.approx(analysis["margin_to_freeze"] - 0.5)

    def test_profile_round_trip(self, case):
        with pytest.raises(RuntimeError):
            case.write_profile()
        case.run()
        path = case.write_profile()
        assert path.exists()

        df = case.load_profile()
        assert len(df) == 60
        assert df["T_out"].iloc[-1] == pytest.approx(case.last_result.T_final)

    def test_load_missing_profile(self, case):
        with pytest.raises(FileNotFoundError):
            case.load_profile("nothing.csv")

    def test_sensitivity_export(self, case):
        results = case.analyze_sensitivity(parameters=["T_in"])
        assert [r.key for r in results] == ["T_in"]
        path = case.write_sensitivity(results)
        assert path.read_text().startswith("key,")
