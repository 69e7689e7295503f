# Handy unit conversions between display units and the solver's units

# Kelvin to Celsius
K2C = lambda T_K: T_K - 273.15

# Celsius to Kelvin
C2K = lambda T_C: T_C + 273.15

# Wind speed
kmh2ms = lambda V_kmh: V_kmh / 3.6
ms2kmh = lambda V_ms: V_ms * 3.6

# Insulation thickness
mm2m = lambda t_mm: t_mm / 1000.0
m2mm = lambda t_m: t_m * 1000.0

# Pressure
bar2Pa = lambda P_bar: P_bar * 1e5
Pa2bar = lambda P_Pa: P_Pa / 1e5


def m3h_to_kgs(flow_m3h: float, rho: float) -> float:
    """Convert a volumetric flow given
    **flow_m3h** (*float*): volumetric flow in m³/h, and
    **rho** (*float*): fluid density in kg/m³
    to a mass flow in kg/s"""
    return flow_m3h / 3600.0 * rho


def kgs_to_m3h(m_dot: float, rho: float) -> float:
    """Convert a mass flow given
    **m_dot** (*float*): mass flow in kg/s, and
    **rho** (*float*): fluid density in kg/m³
    to a volumetric flow in m³/h"""
    return m_dot / rho * 3600.0
