"""Reference table and unit conversion tests."""

import numpy as np
import pytest

from pipe_freeze_risk import tables, units
from pipe_freeze_risk.errors import ReferenceDataMissing


class TestMaterials:

    def test_steel(self):
        steel = tables.material_properties("steel")
        assert steel["k"] == pytest.approx(50.2)
        assert steel["emissivity"] == pytest.approx(0.79)
        assert steel["category"] == "metal"

    def test_list_by_category(self):
        insulation = tables.list_materials("insulation")
        assert "polyurethane_foam" in insulation
        assert "steel" not in insulation
        assert set(insulation) <= set(tables.list_materials())

    def test_insulation_conducts_less_than_metal(self):
        assert tables.material_properties("mineral_wool")["k"] < tables.material_properties("steel")["k"]

    def test_unknown_material(self):
        with pytest.raises(ReferenceDataMissing):
            tables.material_properties("unobtainium")

    def test_roughness(self):
        assert tables.roughness("steel") == pytest.approx(0.045e-3)
        with pytest.raises(ReferenceDataMissing):
            tables.roughness("unobtainium")


class TestPipeDimensions:

    def test_steel_schedule_40(self):
        dims = tables.pipe_dimensions("steel", "40", 2)
        assert dims["D_outer"] == pytest.approx(0.0603)
        assert dims["D_inner"] == pytest.approx(0.0525, abs=1e-4)
        assert dims["wall"] == pytest.approx(3.91e-3)

    def test_numeric_schedule(self):
        assert tables.pipe_dimensions("steel", 80, 1.0) == tables.pipe_dimensions("steel", "80", 1)

    def test_thicker_schedule_has_smaller_bore(self):
        assert tables.pipe_dimensions("steel", "80", 4)["D_inner"] < \
            tables.pipe_dimensions("steel", "40", 4)["D_inner"]

    def test_copper_types(self):
        assert tables.available_schedules("copper") == ["K", "L", "M"]
        walls = [tables.pipe_dimensions("copper", t, 1.0)["wall"] for t in ("K", "L", "M")]
        assert walls == sorted(walls, reverse=True)

    def test_available_nps(self):
        nps = tables.available_nps("stainless_steel", "10S")
        assert 2.0 in nps
        assert nps == sorted(nps)

    @pytest.mark.parametrize("material, schedule, nps", [
        ("titanium", "40", 2), ("steel", "160", 2), ("steel", "40", 3.5), ("copper", "K", 4),
    ])
    def test_missing_entries(self, material, schedule, nps):
        with pytest.raises(ReferenceDataMissing):
            tables.pipe_dimensions(material, schedule, nps)


class TestTablesShape:

    def test_water_tables(self):
        shape = (len(tables.WATER_T_GRID_C), len(tables.WATER_P_GRID_BAR))
        for table in (tables.WATER_DENSITY, tables.WATER_VISCOSITY,
                      tables.WATER_CONDUCTIVITY, tables.WATER_SPECIFIC_HEAT):
            assert table.shape == shape
            assert np.all(table > 0.0)

    def test_air_tables(self):
        n = len(tables.AIR_T_GRID_C)
        for table in (tables.AIR_DENSITY, tables.AIR_VISCOSITY, tables.AIR_CONDUCTIVITY,
                      tables.AIR_SPECIFIC_HEAT, tables.AIR_PRANDTL):
            assert len(table) == n


class TestUnits:

    def test_conversions(self):
        assert units.C2K(0.0) == pytest.approx(273.15)
        assert units.K2C(273.15) == pytest.approx(0.0)
        assert units.kmh2ms(36.0) == pytest.approx(10.0)
        assert units.mm2m(25.0) == pytest.approx(0.025)
        assert units.bar2Pa(3.0) == pytest.approx(3.0e5)

    def test_flow(self):
        m_dot = units.m3h_to_kgs(3.6, 1000.0)
        assert m_dot == pytest.approx(1.0)
        assert units.kgs_to_m3h(m_dot, 1000.0) == pytest.approx(3.6)
