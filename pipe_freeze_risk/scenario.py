from pathlib import Path

import pandas as pd
import yaml

from . import tables
from .freeze_solver.config import build_configuration, settings_from_dict
from .freeze_solver.freeze import analyze_freeze_risk, freeze_message
from .freeze_solver.network import results_to_dataframe, solve_network
from .freeze_solver.segment import DEFAULT_MODELS
from .freeze_solver.sensitivity import analyze_sensitivity, summary_table


class ScenarioCase:
    """
    A helper class to load a pipe scenario from YAML, run the network
    solve and the sensitivity analysis, and export the results as CSV.

    Example scenario file::

        name: winter-line
        pipe:
          material: steel
          schedule: "40"        # or D_inner / D_outer in m
          nps: 2
          length: 300           # m
        insulation:             # optional
          material: polyurethane_foam
          thickness_mm: 25
        fluid:
          T_in: 10              # °C
          P: 3                  # bar absolute
          flow_m3_per_hr: 7.2
        ambient:
          T_amb: -27            # °C
          V_wind_kmh: 20
        settings:               # optional, see SolverSettings
          sampling_points: 250
    """

    def __init__(self, case_file, models=DEFAULT_MODELS):
        self.case_file = Path(case_file)
        self.case_dir = self.case_file.parent
        self.models = models
        self.last_result = None

        if not self.case_file.exists():
            raise FileNotFoundError(f"Scenario file {case_file} not found.")

        with open(self.case_file, "r") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Scenario file {case_file} must contain a mapping.")

        self.name = str(data.get("name", self.case_file.stem))
        self.settings = settings_from_dict(data.get("settings"))
        self.config = self._build(data)

    # -------------------------------------------------
    # Scenario parsing
    # -------------------------------------------------

    def _build(self, data):
        for section in ("pipe", "fluid", "ambient"):
            if not isinstance(data.get(section), dict):
                raise ValueError(f"Scenario '{self.name}' is missing the '{section}' section.")
        pipe, fluid, ambient = data["pipe"], data["fluid"], data["ambient"]
        insulation = data.get("insulation") or {}

        material = pipe.get("material", "steel")
        if "D_inner" in pipe and "D_outer" in pipe:
            D_inner, D_outer = pipe["D_inner"], pipe["D_outer"]
        elif "schedule" in pipe and "nps" in pipe:
            dims = tables.pipe_dimensions(material, pipe["schedule"], pipe["nps"])
            D_inner, D_outer = dims["D_inner"], dims["D_outer"]
        else:
            raise ValueError(
                f"Scenario '{self.name}': give the pipe either D_inner/D_outer or schedule/nps.")
        roughness = pipe["roughness"] if "roughness" in pipe else tables.roughness(material)

        try:
            return build_configuration(
                D_inner=D_inner,
                D_outer=D_outer,
                roughness=roughness,
                material=material,
                total_length=pipe["length"],
                T_in=fluid["T_in"],
                P=fluid["P"],
                flow_m3_per_hr=fluid["flow_m3_per_hr"],
                T_amb=ambient["T_amb"],
                V_wind_kmh=ambient.get("V_wind_kmh", 0.0),
                insulation_material=insulation.get("material"),
                insulation_thickness_mm=insulation.get("thickness_mm"),
                water_props=self.models.water,
            )
        except KeyError as e:
            raise ValueError(f"Scenario '{self.name}' is missing the field {e}.") from None

    # -------------------------------------------------
    # Running the solver
    # -------------------------------------------------

    def run(self, verbose=False):
        """Solve the pipe network and keep the result."""
        self.last_result = solve_network(
            self.config, models=self.models, iterations=self.settings.iterations, verbose=verbose)
        return self.last_result

    def freeze_analysis(self, safety_margin=None):
        """Freeze verdict of the last run (runs the solve if needed)."""
        if self.last_result is None:
            self.run()
        margin = self.settings.safety_threshold if safety_margin is None else safety_margin
        analysis = analyze_freeze_risk(self.last_result, safety_margin=margin)
        print(f"{self.name}: {freeze_message(analysis)}")
        return analysis

    def analyze_sensitivity(self, parameters=None, should_cancel=None):
        """Critical values of every applicable parameter."""
        return analyze_sensitivity(
            self.config, settings=self.settings, models=self.models,
            parameters=parameters, should_cancel=should_cancel)

    # -------------------------------------------------
    # Data export
    # -------------------------------------------------

    def write_profile(self, filename="profile.csv"):
        """Write the per-segment table of the last run to CSV."""
        if self.last_result is None:
            raise RuntimeError("No result available. Use run() first.")
        out_path = self.case_dir / filename
        results_to_dataframe(self.last_result).to_csv(out_path)
        print(f"Profile written to {out_path}")
        return out_path

    def write_sensitivity(self, results, filename="sensitivity.csv"):
        """Write a sensitivity summary to CSV."""
        out_path = self.case_dir / filename
        summary_table(results).to_csv(out_path)
        print(f"Sensitivity summary written to {out_path}")
        return out_path

    def load_profile(self, filename="profile.csv"):
        """Load a previously written profile into a pandas DataFrame."""
        path = self.case_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"No profile file found at {path}")
        return pd.read_csv(path, index_col="index")
