"""
Tests for the coil electrical model.

Validates against a vintage-style single coil (42 AWG, 7600 turns):
1. Wire length and DC resistance in the measured range
2. Wheeler inductance follows the N² law and grows with radius
3. Capacitance grows sub-linearly with turns
4. f0 = 1/(2π√LC), Q = ω0L/R
5. Bobbin capacity and layer build-up
6. Long-solenoid inductance reported alongside Wheeler
"""

import math

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from pickup_engine.calibration import (
    Calibration,
    awg_diameter,
    awg_from_diameter,
    get_awg_spec,
    get_copper_resistivity,
)
from pickup_engine.coil import (
    InvalidGeometryError,
    compute_capacitance,
    compute_coil_results,
    compute_coil_volume,
    compute_inductance,
    compute_max_turns,
    compute_mean_turn_length,
    compute_outer_radius,
    compute_q,
    compute_rdc,
    compute_resonance,
    compute_solenoid_inductance,
    compute_total_wire_length,
    compute_winding_area,
)
from pickup_engine.models import (
    CoilForm,
    CoilGeometry,
    CopperGrade,
    InsulationType,
    WindingStyle,
    WireParams,
)


# Reference coil: Strat-style single coil
VINTAGE_GEOMETRY = CoilGeometry(form=CoilForm.CYLINDRICAL, inner_radius=3.5, outer_radius=7.0, height=11.0)
VINTAGE_WIRE = WireParams(
    wire_diameter=0.0635,
    turns=7600,
    winding_style=WindingStyle.SCATTER,
    packing_factor=0.72,
    insulation=InsulationType.PLAIN_ENAMEL,
    temperature=20.0,
)


class TestGeometry:
    """Test mean turn length, wire length, area and volume."""

    def test_cylindrical_mean_turn(self):
        mlt = compute_mean_turn_length(VINTAGE_GEOMETRY)
        assert mlt == pytest.approx(2 * math.pi * 5.25e-3)

    def test_rectangular_mean_turn(self):
        geometry = CoilGeometry(form=CoilForm.RECTANGULAR, inner_radius=2, outer_radius=6, height=10, length=60)
        # 2·(4 + 60) mm
        assert compute_mean_turn_length(geometry) == pytest.approx(0.128)

    def test_rectangular_length_defaults_to_height(self):
        geometry = CoilGeometry(form=CoilForm.RECTANGULAR, inner_radius=2, outer_radius=6, height=10)
        assert compute_mean_turn_length(geometry) == pytest.approx(2 * (4 + 10) * 1e-3)

    def test_flatwork_mean_turn(self):
        geometry = CoilGeometry(form=CoilForm.FLATWORK, inner_radius=2, outer_radius=6, height=10, length=80)
        expected = (2 * 0.92 * 80 + 4 * (math.pi - 2)) * 1e-3
        assert compute_mean_turn_length(geometry) == pytest.approx(expected)

    def test_degenerate_geometry_is_zero(self):
        geometry = CoilGeometry(inner_radius=0, outer_radius=0, height=0)
        assert compute_mean_turn_length(geometry) == 0.0
        assert compute_inductance(geometry, 5000) == 0.0
        assert compute_coil_volume(geometry) == 0.0

    def test_wire_length_slack(self):
        assert compute_total_wire_length(1000, 0.05) == pytest.approx(1000 * 0.05 * 1.03)

    def test_winding_area(self):
        assert compute_winding_area(VINTAGE_GEOMETRY) == pytest.approx(math.pi * (49 - 12.25))
        rect = CoilGeometry(form=CoilForm.RECTANGULAR, inner_radius=2, outer_radius=6, height=10, length=60)
        assert compute_winding_area(rect) == pytest.approx(240)

    def test_volume(self):
        assert compute_coil_volume(VINTAGE_GEOMETRY) == pytest.approx(math.pi * (49 - 12.25) * 11)


class TestResistance:
    """Test DC resistance."""

    def test_zero_diameter_raises(self):
        with pytest.raises(InvalidGeometryError):
            compute_rdc(100, 0)

    def test_negative_diameter_raises(self):
        with pytest.raises(ValueError):
            compute_rdc(100, -0.06)

    def test_linear_in_length(self):
        assert compute_rdc(200, 0.0635) == pytest.approx(2 * compute_rdc(100, 0.0635))

    def test_matches_awg_table(self):
        """42 AWG is ~5.44 Ω/m at 20 °C."""
        r = compute_rdc(1.0, 0.0635)
        assert r == pytest.approx(get_awg_spec(42).resistance_per_meter, rel=0.01)

    def test_temperature_coefficient(self):
        r20 = compute_rdc(100, 0.0635, temperature=20)
        r45 = compute_rdc(100, 0.0635, temperature=45)
        assert r45 / r20 == pytest.approx(1 + 0.00393 * 25)

    def test_copper_grade(self):
        standard = compute_rdc(100, 0.0635, copper_grade=CopperGrade.STANDARD)
        occ = compute_rdc(100, 0.0635, copper_grade=CopperGrade.OCC)
        assert occ == pytest.approx(standard * 0.99)

    def test_resistivity_reference(self):
        assert get_copper_resistivity(20) == pytest.approx(1.724e-8)


class TestInductance:
    """Test Wheeler inductance."""

    def test_vintage_value(self):
        L = compute_inductance(VINTAGE_GEOMETRY, 7600)
        assert L == pytest.approx(0.3986, rel=0.01)

    def test_n_squared_law(self):
        L1 = compute_inductance(VINTAGE_GEOMETRY, 5000)
        L2 = compute_inductance(VINTAGE_GEOMETRY, 10000)
        assert L2 / L1 == pytest.approx(4.0)

    def test_increases_with_radius(self):
        wider = CoilGeometry(inner_radius=3.5, outer_radius=9.0, height=11.0)
        assert compute_inductance(wider, 7600) > compute_inductance(VINTAGE_GEOMETRY, 7600)

    def test_flatwork_factor(self):
        rect = CoilGeometry(form=CoilForm.RECTANGULAR, inner_radius=2, outer_radius=6, height=10, length=60)
        flat = CoilGeometry(form=CoilForm.FLATWORK, inner_radius=2, outer_radius=6, height=10, length=60)
        assert compute_inductance(flat, 5000) / compute_inductance(rect, 5000) == pytest.approx(1.12)

    def test_solenoid_comparison(self):
        L = compute_solenoid_inductance(VINTAGE_GEOMETRY, 7600)
        assert L > 0
        assert compute_solenoid_inductance(CoilGeometry(inner_radius=1, outer_radius=2, height=0), 100) == 0.0


class TestCapacitance:
    """Test the calibrated sub-linear capacitance model."""

    def test_vintage_value(self):
        C = compute_capacitance(7600, WindingStyle.SCATTER, 0.72, InsulationType.PLAIN_ENAMEL)
        assert C * 1e12 == pytest.approx(126.0, rel=0.01)

    def test_sub_linear_in_turns(self):
        C1 = compute_capacitance(5000)
        C2 = compute_capacitance(10000)
        assert C2 / C1 == pytest.approx(2 ** 0.35)
        assert C2 / C1 < 2

    def test_winding_style_order(self):
        scatter = compute_capacitance(8000, WindingStyle.SCATTER)
        random = compute_capacitance(8000, WindingStyle.RANDOM)
        layered = compute_capacitance(8000, WindingStyle.LAYERED)
        assert scatter < random < layered

    def test_heavy_insulation_lowers_capacitance(self):
        plain = compute_capacitance(8000, insulation=InsulationType.PLAIN_ENAMEL)
        heavy = compute_capacitance(8000, insulation=InsulationType.HEAVY_FORMVAR)
        assert heavy == pytest.approx(plain * 0.9)

    def test_injected_calibration(self):
        doubled = Calibration(capacitance_base_pf=16.0)
        assert compute_capacitance(8000, calibration=doubled) == pytest.approx(2 * compute_capacitance(8000))


class TestResonanceAndQ:
    """Test f0 and unloaded Q."""

    def test_formula(self):
        f0 = compute_resonance(2.5, 100e-12)
        assert f0 == pytest.approx(1 / (2 * math.pi * math.sqrt(2.5 * 100e-12)))

    def test_decreasing_in_l_and_c(self):
        assert compute_resonance(3.0, 100e-12) < compute_resonance(2.0, 100e-12)
        assert compute_resonance(2.0, 150e-12) < compute_resonance(2.0, 100e-12)

    def test_zero_l_or_c(self):
        assert compute_resonance(2.0, 0) == 0
        assert compute_resonance(0, 100e-12) == 0

    def test_q_formula(self):
        assert compute_q(10000, 2.0, 6000) == pytest.approx(2 * math.pi * 10000 * 2.0 / 6000)

    def test_q_decreasing_in_r(self):
        qs = [compute_q(8000, 2.5, r) for r in (4000, 6000, 8000, 12000)]
        assert all(a > b for a, b in zip(qs, qs[1:]))

    def test_lossless_q(self):
        assert compute_q(8000, 2.5, 0) == math.inf


class TestBobbin:
    """Test bobbin capacity and layer build-up."""

    def test_max_turns(self):
        insulated = 0.0635 + 2 * 0.005
        expected = math.floor(3.5 * 11 * 0.72 / (math.pi * (insulated / 2) ** 2))
        assert compute_max_turns(VINTAGE_GEOMETRY, 0.0635, InsulationType.PLAIN_ENAMEL, 0.72) == expected

    def test_bobbin_wall_reduces_capacity(self):
        walled = CoilGeometry(inner_radius=3.5, outer_radius=7.0, height=11.0, bobbin_thickness=0.5)
        assert compute_max_turns(walled, 0.0635) < compute_max_turns(VINTAGE_GEOMETRY, 0.0635)

    def test_no_window(self):
        walled = CoilGeometry(inner_radius=3.5, outer_radius=4.0, height=11.0, bobbin_thickness=0.5)
        assert compute_max_turns(walled, 0.0635) == 0

    def test_single_layer(self):
        # 11 mm × 0.7 / 0.0735 mm ≈ 104 turns per layer
        assert compute_outer_radius(3.5, 11.0, 50, 0.0635) == pytest.approx(3.5 + 0.0735)

    def test_multi_layer(self):
        turns_per_layer = math.floor(11.0 * 0.7 / 0.0735)
        layers = math.ceil(7600 / turns_per_layer)
        expected = 3.5 + layers * 0.0735 / math.sqrt(0.7)
        assert compute_outer_radius(3.5, 11.0, 7600, 0.0635) == pytest.approx(expected)

    def test_no_turns(self):
        assert compute_outer_radius(3.5, 11.0, 0, 0.0635) == 3.5


class TestWireTables:
    """Test AWG lookups."""

    def test_awg_from_diameter(self):
        assert awg_from_diameter(0.0635) == 42
        assert awg_from_diameter(0.1016) == 38
        assert awg_from_diameter(0.5) is None

    def test_awg_formula_matches_table(self):
        assert awg_diameter(36) == pytest.approx(0.127)
        assert awg_diameter(42) == pytest.approx(get_awg_spec(42).bare_diameter, rel=0.01)


class TestCoilResults:
    """End-to-end coil computation."""

    def test_vintage_single_coil(self):
        r = compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE)
        assert 200 < r.total_wire_length < 300
        assert 1000 < r.dc_resistance < 2000
        assert 0.1 < r.inductance < 1.0
        assert r.capacitance * 1e12 == pytest.approx(126.0, rel=0.01)
        assert r.resonant_frequency == pytest.approx(22500, rel=0.01)
        assert r.quality_factor == pytest.approx(40, rel=0.02)

    def test_resonance_consistent_with_l_and_c(self):
        r = compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE)
        assert r.resonant_frequency == pytest.approx(compute_resonance(r.inductance, r.capacitance))

    def test_doubling_turns(self):
        single = compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE)
        doubled = compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE.model_copy(update={'turns': 15200}))
        assert doubled.inductance / single.inductance == pytest.approx(4.0)
        assert doubled.dc_resistance / single.dc_resistance == pytest.approx(2.0)
        assert doubled.total_wire_length / single.total_wire_length == pytest.approx(2.0)
        assert 1 < doubled.capacitance / single.capacitance < 2

    def test_solenoid_comparison_reported(self):
        r = compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE)
        assert r.solenoid_inductance == pytest.approx(compute_solenoid_inductance(VINTAGE_GEOMETRY, 7600))
        assert r.solenoid_inductance > 0

    def test_zero_diameter_raises(self):
        with pytest.raises(InvalidGeometryError):
            compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE.model_copy(update={'wire_diameter': 0.0}))

    def test_results_frozen(self):
        r = compute_coil_results(VINTAGE_GEOMETRY, VINTAGE_WIRE)
        with pytest.raises(Exception):
            r.inductance = 1.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
