"""Static reference data used by the freeze-risk solver.

Pure lookup data: fluid property tables, material properties, absolute
roughness and pipe dimensions by material / schedule / NPS. Nothing here is
computed at run time; lookups of unknown keys raise ``ReferenceDataMissing``.

Sources:
    - Water: IAPWS-95 saturated-liquid values at 1 bar, corrected for liquid
      compressibility up to 10 bar (Perry's, 9th Ed., Section 2)
    - Air: dry air at 1.01325 bar, ideal gas density, Sutherland viscosity,
      ASHRAE Fundamentals 2021 Chapter 1
    - Materials: Incropera, Fundamentals of Heat and Mass Transfer, Tables A.1/A.3
    - Roughness: Perry's Table 6-7 / Moody diagram
    - Dimensions: ASME B36.10M / B36.19M, ASTM B88

Module Summary:
- Constants:
    - ``WATER_T_GRID_C``, ``WATER_P_GRID_BAR`` and the ``WATER_*`` 2D tables.
    - ``AIR_T_GRID_C`` and the ``AIR_*`` 1D tables.
    - ``MATERIALS``, ``ROUGHNESS_M``, ``PIPE_SCHEDULES``.
- Functions:
    - ``material_properties(material_id)``: Material record (k, rho, cp, emissivity).
    - ``list_materials(category=None)``: Material ids, optionally by category.
    - ``roughness(material_id)``: Absolute roughness (m) of a pipe material.
    - ``pipe_dimensions(material, schedule, nps)``: Outer/inner diameter and wall (m).
    - ``available_schedules(material)``: Schedules (or copper types) for a material.
    - ``available_nps(material, schedule)``: Nominal sizes for a schedule.
"""

from typing import Dict, List, Optional

import numpy as np

from .errors import ReferenceDataMissing


# ==================== Water (T x P) ====================
WATER_T_GRID_C = np.array([
    0.0, 5.0, 10.0, 15.0, 20.0, 25.0, 30.0, 35.0, 40.0, 45.0, 50.0,
    55.0, 60.0, 65.0, 70.0, 75.0, 80.0, 85.0, 90.0, 95.0, 100.0,
])
WATER_P_GRID_BAR = np.array([1.0, 2.0, 5.0, 10.0])

# Rows follow WATER_T_GRID_C, columns follow WATER_P_GRID_BAR
WATER_DENSITY = np.array([  # kg/m³
    [999.840, 999.886, 1000.024, 1000.254],  # 0 °C
    [999.970, 1000.016, 1000.154, 1000.384],  # 5 °C
    [999.700, 999.746, 999.884, 1000.114],  # 10 °C
    [999.100, 999.146, 999.284, 999.514],  # 15 °C
    [998.210, 998.256, 998.394, 998.623],  # 20 °C
    [997.050, 997.096, 997.233, 997.463],  # 25 °C
    [995.650, 995.696, 995.833, 996.062],  # 30 °C
    [994.030, 994.076, 994.213, 994.442],  # 35 °C
    [992.220, 992.266, 992.403, 992.631],  # 40 °C
    [990.210, 990.256, 990.392, 990.620],  # 45 °C
    [988.030, 988.075, 988.212, 988.439],  # 50 °C
    [985.690, 985.735, 985.871, 986.098],  # 55 °C
    [983.200, 983.245, 983.381, 983.607],  # 60 °C
    [980.550, 980.595, 980.730, 980.956],  # 65 °C
    [977.760, 977.805, 977.940, 978.165],  # 70 °C
    [974.840, 974.885, 975.019, 975.244],  # 75 °C
    [971.790, 971.835, 971.969, 972.192],  # 80 °C
    [968.610, 968.655, 968.788, 969.011],  # 85 °C
    [965.310, 965.354, 965.488, 965.710],  # 90 °C
    [961.890, 961.934, 962.067, 962.288],  # 95 °C
    [958.350, 958.394, 958.526, 958.747],  # 100 °C
])

WATER_VISCOSITY = np.array([  # Pa·s
    [1.79200e-03, 1.79198e-03, 1.79193e-03, 1.79184e-03],  # 0 °C
    [1.51820e-03, 1.51818e-03, 1.51814e-03, 1.51806e-03],  # 5 °C
    [1.30590e-03, 1.30589e-03, 1.30585e-03, 1.30578e-03],  # 10 °C
    [1.13750e-03, 1.13749e-03, 1.13745e-03, 1.13740e-03],  # 15 °C
    [1.00160e-03, 1.00159e-03, 1.00156e-03, 1.00151e-03],  # 20 °C
    [8.90000e-04, 8.89991e-04, 8.89964e-04, 8.89920e-04],  # 25 °C
    [7.97200e-04, 7.97192e-04, 7.97168e-04, 7.97128e-04],  # 30 °C
    [7.19100e-04, 7.19093e-04, 7.19071e-04, 7.19035e-04],  # 35 °C
    [6.52700e-04, 6.52693e-04, 6.52674e-04, 6.52641e-04],  # 40 °C
    [5.95800e-04, 5.95794e-04, 5.95776e-04, 5.95746e-04],  # 45 °C
    [5.46500e-04, 5.46495e-04, 5.46478e-04, 5.46451e-04],  # 50 °C
    [5.03600e-04, 5.03595e-04, 5.03580e-04, 5.03555e-04],  # 55 °C
    [4.66000e-04, 4.65995e-04, 4.65981e-04, 4.65958e-04],  # 60 °C
    [4.32900e-04, 4.32896e-04, 4.32883e-04, 4.32861e-04],  # 65 °C
    [4.03500e-04, 4.03496e-04, 4.03484e-04, 4.03464e-04],  # 70 °C
    [3.77400e-04, 3.77396e-04, 3.77385e-04, 3.77366e-04],  # 75 °C
    [3.54000e-04, 3.53996e-04, 3.53986e-04, 3.53968e-04],  # 80 °C
    [3.33100e-04, 3.33097e-04, 3.33087e-04, 3.33070e-04],  # 85 °C
    [3.14500e-04, 3.14497e-04, 3.14487e-04, 3.14472e-04],  # 90 °C
    [2.97500e-04, 2.97497e-04, 2.97488e-04, 2.97473e-04],  # 95 °C
    [2.81800e-04, 2.81797e-04, 2.81789e-04, 2.81775e-04],  # 100 °C
])

WATER_CONDUCTIVITY = np.array([  # W/(m·K)
    [0.56100, 0.56103, 0.56113, 0.56130],  # 0 °C
    [0.57050, 0.57053, 0.57064, 0.57081],  # 5 °C
    [0.58000, 0.58003, 0.58014, 0.58031],  # 10 °C
    [0.58930, 0.58934, 0.58944, 0.58962],  # 15 °C
    [0.59840, 0.59844, 0.59854, 0.59872],  # 20 °C
    [0.60720, 0.60724, 0.60735, 0.60753],  # 25 °C
    [0.61550, 0.61554, 0.61565, 0.61583],  # 30 °C
    [0.62330, 0.62334, 0.62345, 0.62364],  # 35 °C
    [0.63060, 0.63064, 0.63075, 0.63094],  # 40 °C
    [0.63730, 0.63734, 0.63745, 0.63764],  # 45 °C
    [0.64360, 0.64364, 0.64375, 0.64395],  # 50 °C
    [0.64920, 0.64924, 0.64936, 0.64955],  # 55 °C
    [0.65430, 0.65434, 0.65446, 0.65465],  # 60 °C
    [0.65880, 0.65884, 0.65896, 0.65916],  # 65 °C
    [0.66270, 0.66274, 0.66286, 0.66306],  # 70 °C
    [0.66620, 0.66624, 0.66636, 0.66656],  # 75 °C
    [0.66920, 0.66924, 0.66936, 0.66956],  # 80 °C
    [0.67160, 0.67164, 0.67176, 0.67196],  # 85 °C
    [0.67370, 0.67374, 0.67386, 0.67406],  # 90 °C
    [0.67530, 0.67534, 0.67546, 0.67566],  # 95 °C
    [0.67660, 0.67664, 0.67676, 0.67697],  # 100 °C
])

WATER_SPECIFIC_HEAT = np.array([  # J/(kg·K)
    [4219.90, 4219.85, 4219.70, 4219.44],  # 0 °C
    [4205.00, 4204.95, 4204.80, 4204.55],  # 5 °C
    [4195.50, 4195.45, 4195.30, 4195.05],  # 10 °C
    [4189.00, 4188.95, 4188.80, 4188.55],  # 15 °C
    [4184.10, 4184.05, 4183.90, 4183.65],  # 20 °C
    [4181.30, 4181.25, 4181.10, 4180.85],  # 25 °C
    [4179.90, 4179.85, 4179.70, 4179.45],  # 30 °C
    [4179.30, 4179.25, 4179.10, 4178.85],  # 35 °C
    [4179.30, 4179.25, 4179.10, 4178.85],  # 40 °C
    [4179.80, 4179.75, 4179.60, 4179.35],  # 45 °C
    [4180.60, 4180.55, 4180.40, 4180.15],  # 50 °C
    [4181.80, 4181.75, 4181.60, 4181.35],  # 55 °C
    [4183.30, 4183.25, 4183.10, 4182.85],  # 60 °C
    [4185.10, 4185.05, 4184.90, 4184.65],  # 65 °C
    [4187.30, 4187.25, 4187.10, 4186.85],  # 70 °C
    [4189.80, 4189.75, 4189.60, 4189.35],  # 75 °C
    [4192.60, 4192.55, 4192.40, 4192.15],  # 80 °C
    [4195.90, 4195.85, 4195.70, 4195.45],  # 85 °C
    [4199.60, 4199.55, 4199.40, 4199.15],  # 90 °C
    [4203.70, 4203.65, 4203.50, 4203.25],  # 95 °C
    [4216.00, 4215.95, 4215.80, 4215.54],  # 100 °C
])


# ==================== Dry air (T, 1 atm) ====================
AIR_T_GRID_C = np.array([
    -40.0, -35.0, -30.0, -25.0, -20.0, -15.0, -10.0, -5.0, 0.0, 5.0,
    10.0, 15.0, 20.0, 25.0, 30.0, 35.0, 40.0, 45.0, 50.0,
])

AIR_DENSITY = np.array([  # kg/m³
    1.514, 1.4822, 1.4517, 1.4225, 1.3944, 1.3674, 1.3414, 1.3164,
    1.2923, 1.2691, 1.2466, 1.225, 1.2041, 1.1839, 1.1644, 1.1455,
    1.1272, 1.1095, 1.0923,
])

AIR_VISCOSITY = np.array([  # Pa·s
    1.510778e-05, 1.537263e-05, 1.563501e-05, 1.589495e-05, 1.615252e-05,
    1.640776e-05, 1.666072e-05, 1.691145e-05, 1.716000e-05, 1.740641e-05,
    1.765072e-05, 1.789298e-05, 1.813322e-05, 1.837149e-05, 1.860783e-05,
    1.884228e-05, 1.907486e-05, 1.930562e-05, 1.953460e-05,
])

AIR_CONDUCTIVITY = np.array([  # W/(m·K)
    0.02123, 0.0216, 0.02196, 0.02232, 0.02268, 0.02304, 0.02339, 0.02375,
    0.0241, 0.02445, 0.0248, 0.02515, 0.0255, 0.02585, 0.0262, 0.02654,
    0.02688, 0.02723, 0.02757,
])

AIR_SPECIFIC_HEAT = np.array([  # J/(kg·K)
    1004.3, 1004.4, 1004.5, 1004.6, 1004.7, 1004.7, 1004.8, 1004.9,
    1005.0, 1005.1, 1005.2, 1005.3, 1005.3, 1005.4, 1005.5, 1005.6,
    1005.7, 1005.8, 1005.8,
])

AIR_PRANDTL = np.array([
    0.7146, 0.715, 0.7152, 0.7154, 0.7156, 0.7157, 0.7157, 0.7157,
    0.7156, 0.7155, 0.7153, 0.7151, 0.7149, 0.7146, 0.7143, 0.7139,
    0.7135, 0.7131, 0.7127,
])


# ==================== Materials ====================
# k: W/(m·K), rho: kg/m³, cp: J/(kg·K), emissivity of the outer surface
MATERIALS: Dict[str, Dict] = {
    # Pipe metals
    "steel": dict(name="Carbon steel (oxidised)", category="metal",
                  k=50.2, rho=7850.0, cp=486.0, emissivity=0.79),
    "steel_polished": dict(name="Carbon steel (polished)", category="metal",
                           k=50.2, rho=7850.0, cp=486.0, emissivity=0.07),
    "stainless_steel": dict(name="Stainless steel 304 (oxidised)", category="metal",
                            k=16.2, rho=8000.0, cp=500.0, emissivity=0.28),
    "stainless_steel_polished": dict(name="Stainless steel 304 (polished)", category="metal",
                                     k=16.2, rho=8000.0, cp=500.0, emissivity=0.14),
    "copper": dict(name="Copper (oxidised)", category="metal",
                   k=401.0, rho=8960.0, cp=385.0, emissivity=0.78),
    "copper_polished": dict(name="Copper (polished)", category="metal",
                            k=401.0, rho=8960.0, cp=385.0, emissivity=0.023),
    "cast_iron": dict(name="Grey cast iron", category="metal",
                      k=52.0, rho=7200.0, cp=460.0, emissivity=0.81),
    "aluminum": dict(name="Aluminium 6061", category="metal",
                     k=237.0, rho=2700.0, cp=903.0, emissivity=0.09),
    # Insulation
    "fiberglass": dict(name="Fibreglass", category="insulation",
                       k=0.04, rho=32.0, cp=835.0, emissivity=0.9),
    "mineral_wool": dict(name="Mineral (rock) wool", category="insulation",
                         k=0.038, rho=100.0, cp=840.0, emissivity=0.9),
    "polyurethane_foam": dict(name="Rigid polyurethane foam", category="insulation",
                              k=0.026, rho=40.0, cp=1400.0, emissivity=0.9),
    "polystyrene_expanded": dict(name="Expanded polystyrene (EPS)", category="insulation",
                                 k=0.036, rho=25.0, cp=1300.0, emissivity=0.9),
    "polystyrene_extruded": dict(name="Extruded polystyrene (XPS)", category="insulation",
                                 k=0.029, rho=35.0, cp=1300.0, emissivity=0.9),
    "elastomeric_foam": dict(name="Elastomeric foam", category="insulation",
                             k=0.04, rho=70.0, cp=1500.0, emissivity=0.85),
    # Plastic pipes
    "pvc": dict(name="PVC", category="plastic",
                k=0.19, rho=1380.0, cp=900.0, emissivity=0.91),
    "hdpe": dict(name="HDPE", category="plastic",
                 k=0.5, rho=950.0, cp=2300.0, emissivity=0.94),
    "pex": dict(name="PEX", category="plastic",
                k=0.4, rho=940.0, cp=2300.0, emissivity=0.94),
}

# Absolute roughness of new pipe (m)
ROUGHNESS_M: Dict[str, float] = {
    "steel": 0.045e-3,
    "steel_polished": 0.045e-3,
    "stainless_steel": 0.015e-3,
    "stainless_steel_polished": 0.015e-3,
    "copper": 0.0015e-3,
    "copper_polished": 0.0015e-3,
    "cast_iron": 0.26e-3,
    "aluminum": 0.0015e-3,
    "pvc": 0.0015e-3,
    "hdpe": 0.007e-3,
    "pex": 0.007e-3,
}


# ==================== Pipe dimensions ====================
# material -> schedule (or copper type) -> NPS (in) -> (OD mm, wall mm)
PIPE_SCHEDULES: Dict[str, Dict[str, Dict[float, tuple]]] = {
    "steel": {
        "40": {
            0.5: (21.3, 2.77), 0.75: (26.7, 2.87), 1.0: (33.4, 3.38),
            1.25: (42.2, 3.56), 1.5: (48.3, 3.68), 2.0: (60.3, 3.91),
            2.5: (73.0, 5.16), 3.0: (88.9, 5.49), 4.0: (114.3, 6.02),
            6.0: (168.3, 7.11), 8.0: (219.1, 8.18), 10.0: (273.1, 9.27),
            12.0: (323.8, 10.31),
        },
        "80": {
            0.5: (21.3, 3.73), 0.75: (26.7, 3.91), 1.0: (33.4, 4.55),
            1.25: (42.2, 4.85), 1.5: (48.3, 5.08), 2.0: (60.3, 5.54),
            2.5: (73.0, 7.01), 3.0: (88.9, 7.62), 4.0: (114.3, 8.56),
            6.0: (168.3, 10.97), 8.0: (219.1, 12.70), 10.0: (273.1, 15.09),
            12.0: (323.8, 17.48),
        },
    },
    "stainless_steel": {
        "10S": {
            0.5: (21.3, 2.11), 0.75: (26.7, 2.11), 1.0: (33.4, 2.77),
            1.25: (42.2, 2.77), 1.5: (48.3, 2.77), 2.0: (60.3, 2.77),
            2.5: (73.0, 3.05), 3.0: (88.9, 3.05), 4.0: (114.3, 3.05),
            6.0: (168.3, 3.40), 8.0: (219.1, 3.76), 10.0: (273.1, 4.19),
            12.0: (323.8, 4.57),
        },
        "40S": {
            0.5: (21.3, 2.77), 0.75: (26.7, 2.87), 1.0: (33.4, 3.38),
            1.25: (42.2, 3.56), 1.5: (48.3, 3.68), 2.0: (60.3, 3.91),
            2.5: (73.0, 5.16), 3.0: (88.9, 5.49), 4.0: (114.3, 6.02),
            6.0: (168.3, 7.11), 8.0: (219.1, 8.18), 10.0: (273.1, 9.27),
            12.0: (323.8, 9.53),
        },
    },
    # Copper tube is sized by type; OD is 1/8 in above the nominal size
    "copper": {
        "K": {
            0.5: (15.875, 1.245), 0.75: (22.225, 1.651), 1.0: (28.575, 1.651),
            1.5: (41.275, 1.829), 2.0: (53.975, 2.108),
        },
        "L": {
            0.5: (15.875, 1.016), 0.75: (22.225, 1.143), 1.0: (28.575, 1.270),
            1.5: (41.275, 1.524), 2.0: (53.975, 1.778),
        },
        "M": {
            0.5: (15.875, 0.711), 0.75: (22.225, 0.813), 1.0: (28.575, 0.889),
            1.5: (41.275, 1.232), 2.0: (53.975, 1.473),
        },
    },
}


def material_properties(material_id: str) -> Dict:
    """Return the property record of a pipe or insulation material.

    Args:
        material_id: Key in ``MATERIALS`` (e.g. 'steel', 'polyurethane_foam')

    Returns:
        Dict with name, category, k (W/m/K), rho (kg/m³), cp (J/kg/K), emissivity

    Raises:
        ReferenceDataMissing: If the material is unknown
    """
    try:
        return dict(MATERIALS[material_id])
    except KeyError:
        available = ", ".join(sorted(MATERIALS))
        raise ReferenceDataMissing(
            f"Unknown material '{material_id}'. Available: {available}") from None


def list_materials(category: Optional[str] = None) -> List[str]:
    """Material ids, optionally restricted to 'metal', 'insulation' or 'plastic'."""
    if category is None:
        return list(MATERIALS)
    return [key for key, rec in MATERIALS.items() if rec["category"] == category]


def roughness(material_id: str) -> float:
    """Absolute wall roughness (m) of a pipe material."""
    if material_id not in ROUGHNESS_M:
        raise ReferenceDataMissing(f"No roughness data for material '{material_id}'")
    return ROUGHNESS_M[material_id]


def available_schedules(material: str) -> List[str]:
    """Schedules (steel, stainless) or types (copper) tabulated for a material."""
    if material not in PIPE_SCHEDULES:
        raise ReferenceDataMissing(f"No pipe dimension table for material '{material}'")
    return list(PIPE_SCHEDULES[material])


def available_nps(material: str, schedule) -> List[float]:
    """Nominal pipe sizes (in) tabulated for a material and schedule."""
    return sorted(_schedule_table(material, schedule))


def pipe_dimensions(material: str, schedule, nps: float) -> Dict[str, float]:
    """Look up pipe dimensions by material, schedule (or copper type) and NPS.

    Args:
        material: 'steel', 'stainless_steel' or 'copper'
        schedule: Schedule ('40', '80', '10S', '40S') or copper type ('K', 'L', 'M');
            numbers are accepted and converted to strings
        nps: Nominal pipe size (in)

    Returns:
        Dict with D_outer, D_inner and wall (all in m) and the NPS

    Raises:
        ReferenceDataMissing: If any key is not tabulated
    """
    table = _schedule_table(material, schedule)
    try:
        OD_mm, WT_mm = table[float(nps)]
    except (KeyError, TypeError, ValueError):
        raise ReferenceDataMissing(
            f'NPS {nps}" not found for {material} {schedule}') from None
    return dict(
        D_outer=OD_mm/1000.0,
        D_inner=(OD_mm - 2.0*WT_mm)/1000.0,
        wall=WT_mm/1000.0,
        NPS=float(nps),
    )


def _schedule_table(material: str, schedule) -> Dict[float, tuple]:
    key = str(schedule)
    schedules = PIPE_SCHEDULES.get(material)
    if schedules is None:
        raise ReferenceDataMissing(f"No pipe dimension table for material '{material}'")
    if key not in schedules:
        raise ReferenceDataMissing(f"Unknown schedule/type for {material}: {key}")
    return schedules[key]
