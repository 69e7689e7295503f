"""Thermal resistance network tests."""

import math

import pytest

from pipe_freeze_risk.errors import InvalidInput
from pipe_freeze_risk.freeze_solver import resistance


def test_convection_resistance():
    assert resistance.convection_resistance(10.0, 0.1, 2.0) == pytest.approx(1.0/(10.0*math.pi*0.1*2.0))


def test_conduction_resistance():
    R = resistance.conduction_resistance(0.025, 0.03, 50.0, 1.0)
    assert R == pytest.approx(math.log(0.03/0.025)/(2.0*math.pi*50.0))


def test_series_sum_and_breakdown():
    layers = [
        dict(type="convection", h=1000.0, D=0.05, name="inside"),
        dict(type="conduction", r_inner=0.025, r_outer=0.03, k=50.0, name="wall"),
        dict(type="convection", h=20.0, D=0.06, name="outside"),
    ]
    network = resistance.pipe_resistance(layers, 2.0)
    names = [name for name, _ in network["layers"]]
    assert names == ["inside", "wall", "outside"]
    assert network["R_total"] == pytest.approx(sum(R for _, R in network["layers"]))
    assert resistance.overall_conductance(network["R_total"]) == pytest.approx(1.0/network["R_total"])


def test_resistance_inversely_proportional_to_length():
    layers = [dict(type="convection", h=20.0, D=0.06)]
    assert resistance.pipe_resistance(layers, 1.0)["R_total"] == \
        pytest.approx(4.0*resistance.pipe_resistance(layers, 4.0)["R_total"])


def test_interface_temperatures():
    profile = resistance.interface_temperatures(60.0, -10.0, [("a", 1.0), ("b", 3.0), ("c", 3.0)])
    assert [name for name, _ in profile] == ["a", "b", "c"]
    assert profile[0][1] == pytest.approx(50.0)
    assert profile[1][1] == pytest.approx(20.0)
    assert profile[-1][1] == pytest.approx(-10.0)


@pytest.mark.parametrize("layer", [
    dict(type="convection", h=0.0, D=0.05),
    dict(type="conduction", r_inner=0.03, r_outer=0.025, k=50.0),
    dict(type="conduction", r_inner=0.025, r_outer=0.03, k=0.0),
    dict(type="radiation", h=5.0, D=0.05),
])
def test_invalid_layers(layer):
    with pytest.raises(InvalidInput):
        resistance.pipe_resistance([layer], 1.0)


def test_empty_network():
    with pytest.raises(InvalidInput):
        resistance.pipe_resistance([], 1.0)
