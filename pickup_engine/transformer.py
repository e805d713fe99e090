"""
Pickup step-up / step-down transformer model.

Ideal part:
    n = Ns / Np,   Z_reflected = Z_load / n²

Magnetizing inductance from core geometry, with an air gap mixed in by
series reluctance:
    µ_eff = µr / (1 + µr·g/le)
    Lm = µ0 · µ_eff · Np² · Ae / le

Non-ideal part. Driven from an ideal source, the primary is the series
ladder

    ──Rp──jωLlk──┬──────────┬── Z_reflected + Rs/n²
                 jωLm    1/(jωCiw)
    ─────────────┴──────────┴──

Leakage inductance and interwinding capacitance set the high-frequency
rolloff; collapsing the ladder to Lm alone would hide it. When a pickup
coil drives the primary, the coil sees Lm as a shunt instead:

    Z_primary = Rp + [(jωLm ‖ (jωLlk + Rs/n² + Z_reflected)) ‖ 1/(jωCiw)]

Parasitic coefficients are empirical estimates, not closed-form physics.

Saturation (sine excitation):
    B_peak = V_rms / (4.44 · f · Np · Ae)
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from pickup_engine.calibration import (
    COPPER_RESISTIVITY_20C,
    DEFAULT_CALIBRATION,
    MU_0,
    Calibration,
    awg_diameter,
    get_awg_spec,
    get_core_material_properties,
)
from pickup_engine.impedance import (
    OPEN_ARRAY_VALUE,
    REFERENCE_FREQUENCY,
    SWEEP_MAX_HZ,
    SWEEP_MIN_HZ,
    SWEEP_POINTS,
    angular_frequencies,
    build_frequency_points,
    compute_capacitor_impedance,
    compute_capacitor_impedance_array,
    compute_coil_impedance_array,
    compute_load_impedance,
    compute_load_impedance_array,
    compute_transfer_function_array,
    generate_log_frequencies,
    parallel_array,
)
from pickup_engine.models import (
    ConductorMaterial,
    CoreLoss,
    CoreMaterial,
    FrequencyPoint,
    LoadParams,
    PrimaryWindingType,
    TransformerComputedResults,
    TransformerCoreParams,
    TransformerParams,
    TransformerParasitics,
    TransformerWindingStyle,
)
from pickup_engine.phasor import OPEN_CIRCUIT, Complex, add, magnitude, parallel

logger = logging.getLogger(__name__)

DEFAULT_PLATE_THICKNESS = 0.1   # mm
DEFAULT_PLATE_WIDTH = 5.0       # mm
DEFAULT_PRIMARY_AWG = 38


# --- Ideal transformer ---

def compute_turns_ratio(primary_turns: int, secondary_turns: int) -> float:
    """Ns/Np, 0 when the primary is unwound."""
    if primary_turns <= 0:
        return 0.0
    return secondary_turns / primary_turns


def compute_voltage_ratio(turns_ratio: float) -> float:
    return turns_ratio


def compute_reflected_load(load_impedance: Complex, turns_ratio: float) -> Complex:
    """Load seen from the primary, Z/n². An absent secondary (n = 0) is an open primary."""
    if turns_ratio == 0:
        return OPEN_CIRCUIT
    return load_impedance.scale(1.0 / (turns_ratio * turns_ratio))


def compute_reflected_load_magnitude(
    load: LoadParams,
    turns_ratio: float,
    frequency: float = REFERENCE_FREQUENCY,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    z_load = compute_load_impedance(load, frequency, calibration)
    return magnitude(compute_reflected_load(z_load, turns_ratio))


# --- Core ---

def compute_effective_permeability_with_gap(
    core_permeability: float,
    air_gap: float,
    effective_length: float,
) -> float:
    """Permeability of a gapped core. Equal to µr without a gap, strictly lower with one."""
    if air_gap <= 0:
        return core_permeability
    if effective_length <= 0:
        return 0.0
    return core_permeability / (1 + core_permeability * air_gap / effective_length)


def compute_primary_inductance(
    primary_turns: int,
    effective_area: float,
    effective_length: float,
    effective_permeability: float,
) -> float:
    """
    Magnetizing inductance of the primary (H).

    Args:
        primary_turns: Np.
        effective_area: Ae (mm²).
        effective_length: le (mm).
        effective_permeability: µ_eff, gap included.
    """
    if effective_length <= 0:
        return 0.0
    area = effective_area * 1e-6        # mm² → m²
    length = effective_length * 1e-3    # mm → m
    return MU_0 * effective_permeability * primary_turns ** 2 * area / length


# --- Parasitics ---

def compute_leakage_inductance(
    primary_inductance: float,
    winding_style: TransformerWindingStyle,
    shielding: bool,
) -> float:
    """Uncoupled inductance: ~1.5% of Lp interleaved, ~6% side by side."""
    factor = 0.015 if winding_style == TransformerWindingStyle.INTERLEAVED else 0.06
    if shielding:
        factor *= 1.2  # shield spaces the windings apart
    return primary_inductance * factor


def compute_interwinding_capacitance(transformer: TransformerParams) -> float:
    """Primary-to-secondary capacitance (F), 5-200 pF (300 pF for plate primaries)."""
    winding = transformer.winding
    conductor = winding.primary_conductor

    turns_factor = math.sqrt(max(winding.primary_turns * winding.secondary_turns, 0))
    area_factor = max(transformer.core.effective_area, 0) / 50  # ~50 mm² typical core
    cap_pf = 5 * math.sqrt(area_factor) * math.sqrt(turns_factor / 100)

    if conductor.type == PrimaryWindingType.PLATE:
        width = conductor.plate_width or DEFAULT_PLATE_WIDTH
        cap_pf *= min(4.0, 1.5 + width / 10)

    if winding.winding_style == TransformerWindingStyle.INTERLEAVED:
        cap_pf *= 2.5
    if winding.shielding:
        cap_pf *= 0.3

    max_pf = 300.0 if conductor.type == PrimaryWindingType.PLATE else 200.0
    return max(5.0, min(max_pf, cap_pf)) * 1e-12


def compute_primary_capacitance(transformer: TransformerParams) -> float:
    """Primary self-capacitance (F)."""
    winding = transformer.winding
    conductor = winding.primary_conductor

    cap_pf = 3 * math.sqrt(max(winding.primary_turns, 0) / 100)

    if conductor.type == PrimaryWindingType.PLATE:
        width = conductor.plate_width or DEFAULT_PLATE_WIDTH
        thickness = conductor.plate_thickness or DEFAULT_PLATE_THICKNESS
        # wider and thinner strips stack closer
        plate_factor = (width / 5) * math.sqrt(0.5 / thickness)
        cap_pf *= max(1.5, min(5.0, plate_factor))
        max_pf = 100.0
    else:
        awg = conductor.wire_awg or DEFAULT_PRIMARY_AWG
        cap_pf *= max(0.5, min(2.0, 1.0 + (38 - awg) * 0.05))
        max_pf = 50.0

    if winding.winding_style == TransformerWindingStyle.INTERLEAVED:
        cap_pf *= 1.5

    return max(3.0, min(max_pf, cap_pf)) * 1e-12


def compute_secondary_capacitance(transformer: TransformerParams) -> float:
    """Secondary self-capacitance (F), 5-150 pF."""
    winding = transformer.winding

    cap_pf = 5 * math.sqrt(max(winding.secondary_turns, 0) / 500)
    cap_pf *= max(0.5, min(2.0, 1.0 + (40 - winding.secondary_awg) * 0.04))

    if winding.winding_style == TransformerWindingStyle.INTERLEAVED:
        cap_pf *= 1.3

    return max(5.0, min(150.0, cap_pf)) * 1e-12


def compute_core_mean_turn_length(core: TransformerCoreParams) -> float:
    """Mean winding turn length (mm) around the core."""
    if core.toroid_geometry is not None:
        geometry = core.toroid_geometry
        mean_diameter = (geometry.inner_diameter + geometry.outer_diameter) / 2
        return math.pi * mean_diameter + 2 * geometry.straight_length
    # No dimensions: rough estimate from the magnetic path
    return core.effective_length * 0.4


def _wire_resistance(
    awg: int,
    length: float,
    material: ConductorMaterial,
    calibration: Calibration,
) -> float:
    factor = calibration.conductors[material]
    spec = get_awg_spec(awg)
    if spec is None:
        diameter = awg_diameter(awg) * 1e-3  # mm → m
        area = math.pi * (diameter / 2) ** 2
        return COPPER_RESISTIVITY_20C * factor * length / area
    return spec.resistance_per_meter * length * factor


def compute_primary_resistance(
    transformer: TransformerParams,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """Primary DC resistance (Ohms), wire or plate conductor."""
    winding = transformer.winding
    conductor = winding.primary_conductor
    length = winding.primary_turns * compute_core_mean_turn_length(transformer.core) * 1e-3  # mm → m

    if conductor.type == PrimaryWindingType.PLATE:
        thickness = (conductor.plate_thickness or DEFAULT_PLATE_THICKNESS) * 1e-3
        width = (conductor.plate_width or DEFAULT_PLATE_WIDTH) * 1e-3
        resistivity = COPPER_RESISTIVITY_20C * calibration.conductors[conductor.material]
        return resistivity * length / (thickness * width)

    awg = conductor.wire_awg or DEFAULT_PRIMARY_AWG
    return _wire_resistance(awg, length, conductor.material, calibration)


def compute_secondary_resistance(
    transformer: TransformerParams,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """Secondary DC resistance (Ohms)."""
    winding = transformer.winding
    length = winding.secondary_turns * compute_core_mean_turn_length(transformer.core) * 1e-3
    return _wire_resistance(winding.secondary_awg, length, winding.secondary_material, calibration)


def compute_parasitics(
    transformer: TransformerParams,
    primary_inductance: float,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> TransformerParasitics:
    winding = transformer.winding
    return TransformerParasitics(
        leakage_inductance=compute_leakage_inductance(
            primary_inductance, winding.winding_style, winding.shielding,
        ),
        interwinding_capacitance=compute_interwinding_capacitance(transformer),
        primary_capacitance=compute_primary_capacitance(transformer),
        secondary_capacitance=compute_secondary_capacitance(transformer),
        primary_resistance=compute_primary_resistance(transformer, calibration),
        secondary_resistance=compute_secondary_resistance(transformer, calibration),
    )


@dataclass(frozen=True)
class TransformerModel:
    """Derived transformer constants, computed once per request and shared by every sweep point."""
    turns_ratio: float
    effective_permeability: float
    primary_inductance: float
    saturation_flux: float
    parasitics: TransformerParasitics

    @property
    def reflected_secondary_resistance(self) -> float:
        """Rs/n², folded into the reflected load."""
        if self.turns_ratio == 0:
            return 0.0
        return self.parasitics.secondary_resistance / (self.turns_ratio ** 2)


def build_transformer_model(
    transformer: TransformerParams,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> TransformerModel:
    core = transformer.core
    winding = transformer.winding
    material = get_core_material_properties(core.material, calibration)

    effective_permeability = compute_effective_permeability_with_gap(
        material.permeability, core.air_gap, core.effective_length,
    )
    primary_inductance = compute_primary_inductance(
        winding.primary_turns, core.effective_area, core.effective_length, effective_permeability,
    )
    return TransformerModel(
        turns_ratio=compute_turns_ratio(winding.primary_turns, winding.secondary_turns),
        effective_permeability=effective_permeability,
        primary_inductance=primary_inductance,
        saturation_flux=material.saturation_flux,
        parasitics=compute_parasitics(transformer, primary_inductance, calibration),
    )


# --- Impedance and response ---

def compute_transformer_impedance(
    primary_inductance: float,
    leakage_inductance: float,
    interwinding_capacitance: float,
    primary_resistance: float,
    frequency: float,
) -> Complex:
    """Rp + jωLlk + (jωLm ‖ 1/(jωCiw)), seen from the primary."""
    omega = 2 * math.pi * frequency
    z_rp = Complex(primary_resistance, 0.0)
    z_llk = Complex(0.0, omega * leakage_inductance)
    z_lm = Complex(0.0, omega * primary_inductance)
    z_ciw = compute_capacitor_impedance(interwinding_capacitance, frequency)
    return add(z_rp, add(z_llk, parallel(z_lm, z_ciw)))


def compute_transformer_impedance_array(model: TransformerModel, omega: np.ndarray) -> np.ndarray:
    """The series ladder of ``compute_transformer_impedance`` over a sweep."""
    parasitics = model.parasitics
    omega = np.asarray(omega, dtype=float)
    z_shunt = parallel_array(
        1j * omega * model.primary_inductance,
        compute_capacitor_impedance_array(parasitics.interwinding_capacitance, omega),
    )
    return parasitics.primary_resistance + 1j * omega * parasitics.leakage_inductance + z_shunt


def _reflected_secondary(
    model: TransformerModel,
    load: LoadParams,
    omega: np.ndarray,
    calibration: Calibration,
) -> np.ndarray:
    """Z_load/n² + Rs/n² per point; open when the secondary is unwound."""
    omega = np.asarray(omega, dtype=float)
    if model.turns_ratio == 0:
        return np.full(omega.shape, OPEN_ARRAY_VALUE, dtype=complex)
    z_load = compute_load_impedance_array(load, omega, calibration)
    return z_load / model.turns_ratio ** 2 + model.reflected_secondary_resistance


def compute_primary_input_impedance(
    model: TransformerModel,
    load: LoadParams,
    frequencies: np.ndarray,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> np.ndarray:
    """
    Impedance a pickup coil sees looking into the primary terminals.

        Rp + [(jωLm ‖ (jωLlk + Rs/n² + Z_load/n²)) ‖ 1/(jωCiw)]

    Lm shunts the primary while leakage stays in series with the
    reflected secondary.
    """
    parasitics = model.parasitics
    omega = angular_frequencies(frequencies)

    z_secondary = 1j * omega * parasitics.leakage_inductance + _reflected_secondary(
        model, load, omega, calibration,
    )
    z = parallel_array(1j * omega * model.primary_inductance, z_secondary)
    z = parallel_array(z, compute_capacitor_impedance_array(parasitics.interwinding_capacitance, omega))
    return parasitics.primary_resistance + z


def _relative_reference(
    transfer,
    reference_frequency: Optional[float],
    gain: float,
) -> Optional[float]:
    if reference_frequency is None:
        return None
    return float(np.abs(transfer([reference_frequency]))[0]) * gain


def compute_transformer_response(
    transformer: TransformerParams,
    load: LoadParams,
    frequencies: np.ndarray,
    model: Optional[TransformerModel] = None,
    reference_frequency: Optional[float] = REFERENCE_FREQUENCY,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> List[FrequencyPoint]:
    """
    Transformer response driven from an ideal source into the loaded secondary.

    The voltage gain is |H|·n. With a reference frequency the gain is
    reported relative to its value there (mid-band = 1); without one it is
    the absolute step-up gain.
    """
    if model is None:
        model = build_transformer_model(transformer, calibration)
    n = model.turns_ratio

    def transfer(freqs) -> np.ndarray:
        omega = angular_frequencies(freqs)
        return compute_transfer_function_array(
            compute_transformer_impedance_array(model, omega),
            _reflected_secondary(model, load, omega, calibration),
        )

    reference = _relative_reference(transfer, reference_frequency, n)
    return build_frequency_points(frequencies, transfer(frequencies), n, reference)


def compute_system_response_with_transformer(
    resistance: float,
    inductance: float,
    capacitance: float,
    transformer: TransformerParams,
    load: LoadParams,
    frequencies: np.ndarray,
    model: Optional[TransformerModel] = None,
    reference_frequency: Optional[float] = REFERENCE_FREQUENCY,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> List[FrequencyPoint]:
    """
    Pickup coil driving the transformer primary, stepped up by n.

    The coil divides against the primary input impedance (see
    ``compute_primary_input_impedance``); the primary voltage is then
    scaled by the turns ratio.
    """
    if model is None:
        model = build_transformer_model(transformer, calibration)
    n = model.turns_ratio

    def transfer(freqs) -> np.ndarray:
        z_coil = compute_coil_impedance_array(resistance, inductance, capacitance, angular_frequencies(freqs))
        z_primary = compute_primary_input_impedance(model, load, freqs, calibration)
        return compute_transfer_function_array(z_coil, z_primary)

    reference = _relative_reference(transfer, reference_frequency, n)
    return build_frequency_points(frequencies, transfer(frequencies), n, reference)


def compute_transformer_bandwidth(
    transformer: TransformerParams,
    load: LoadParams,
    model: Optional[TransformerModel] = None,
    num_points: int = SWEEP_POINTS,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """
    Upper −3 dB frequency (Hz) on a 20 Hz–100 kHz sweep.

    Scans forward from the peak for the first point below 0.707 × peak. If
    the response never drops that far the top of the sweep is returned.
    """
    freqs = generate_log_frequencies(SWEEP_MIN_HZ, SWEEP_MAX_HZ, num_points)
    response = compute_transformer_response(
        transformer, load, freqs, model=model, reference_frequency=None, calibration=calibration,
    )
    mags = np.array([p.magnitude for p in response])

    peak_idx = int(np.argmax(mags))
    target = mags[peak_idx] * 0.707
    for i in range(peak_idx, len(mags)):
        if mags[i] < target:
            return float(freqs[i])

    logger.debug("No -3 dB point below %.0f Hz, bandwidth bounded by the sweep", freqs[-1])
    return float(freqs[-1])


# --- Saturation and loss ---

def compute_peak_flux_density(
    voltage_rms: float,
    frequency: float,
    primary_turns: int,
    effective_area: float,
) -> float:
    """Peak flux density (T) for sine drive; Ae in mm²."""
    if frequency <= 0 or primary_turns <= 0 or effective_area <= 0:
        return 0.0
    area = effective_area * 1e-6  # mm² → m²
    return voltage_rms / (4.44 * frequency * primary_turns * area)


def compute_saturation_margin(peak_flux_density: float, saturation_flux: float) -> float:
    """Headroom 1 − B/Bsat, floored at 0."""
    if saturation_flux <= 0:
        return 0.0
    return max(0.0, 1 - peak_flux_density / saturation_flux)


def estimate_core_loss(
    material: CoreMaterial,
    frequency: float,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> CoreLoss:
    """Qualitative loss bucket from the material coefficient, rising with log frequency."""
    if frequency <= 0:
        return CoreLoss.LOW
    coefficient = get_core_material_properties(material, calibration).loss_coefficient
    loss_factor = coefficient * (1 + math.log10(frequency / 100) / 3)
    if loss_factor < 0.4:
        return CoreLoss.LOW
    if loss_factor < 0.8:
        return CoreLoss.MEDIUM
    return CoreLoss.HIGH


def compute_transformer_results(
    transformer: TransformerParams,
    load: LoadParams,
    source_voltage_rms: float = 0.1,
    operating_frequency: float = REFERENCE_FREQUENCY,
    model: Optional[TransformerModel] = None,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> TransformerComputedResults:
    """
    All transformer figures of merit for one request.

    Args:
        transformer: Core and winding description.
        load: Load on the secondary.
        source_voltage_rms: Drive level for the saturation check (V rms).
        operating_frequency: Frequency for saturation and core loss (Hz).
        model: Prebuilt model for `transformer`, reused instead of rebuilt.
    """
    if model is None:
        model = build_transformer_model(transformer, calibration)
    core = transformer.core

    peak_flux = compute_peak_flux_density(
        source_voltage_rms, operating_frequency, transformer.winding.primary_turns, core.effective_area,
    )

    return TransformerComputedResults(
        turns_ratio=model.turns_ratio,
        voltage_ratio=compute_voltage_ratio(model.turns_ratio),
        reflected_load=compute_reflected_load_magnitude(load, model.turns_ratio, calibration=calibration),
        primary_inductance=model.primary_inductance,
        effective_permeability=model.effective_permeability,
        parasitics=model.parasitics,
        bandwidth=compute_transformer_bandwidth(transformer, load, model=model, calibration=calibration),
        saturation_margin=compute_saturation_margin(peak_flux, model.saturation_flux),
        core_loss_estimate=estimate_core_loss(core.material, operating_frequency, calibration),
        saturation_flux=model.saturation_flux,
    )
