"""
Coil and load network solver.

The pickup is modelled as a voltage source behind its own impedance,
driving the guitar's passive load:

    Z_coil = (R + jωL) ‖ 1/(jωC)

    Z_load = R_vol ‖ (R_tone + 1/(jωC_tone)) ‖ R_amp ‖ 1/(jωC_cable)

    H(f) = Z_load / (Z_coil + Z_load)

where R_vol = R_pot·position + R_min·(1 − position) is the wiper-scaled
volume pot and C_cable = cable length × capacitance per metre.

Loading shifts and can suppress the coil's unloaded peak, so the loaded
resonance is located numerically on a dense log sweep and the loaded Q is
taken from the interpolated half-power (−3 dB) bandwidth around it.

Single-frequency values use the ``Complex`` phasor; sweeps evaluate the
same networks on numpy complex arrays over ω = 2πf, with an infinite
entry standing for an open branch.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from pickup_engine.calibration import DEFAULT_CALIBRATION, Calibration
from pickup_engine.models import (
    CoilComputedResults,
    FrequencyPoint,
    ImpedancePoint,
    LoadComputedResults,
    LoadedResonance,
    LoadParams,
    TransformerParams,
    TransientCharacteristics,
)
from pickup_engine.phasor import (
    OPEN_CIRCUIT,
    Complex,
    add,
    divide,
    magnitude,
    parallel,
)

logger = logging.getLogger(__name__)

# Sweep used for loaded resonance and bandwidth searches
SWEEP_MIN_HZ = 20.0
SWEEP_MAX_HZ = 100_000.0
SWEEP_POINTS = 500

REFERENCE_FREQUENCY = 1000.0
DB_FLOOR = 1e-10


def generate_log_frequencies(
    f_min: float = SWEEP_MIN_HZ,
    f_max: float = SWEEP_MAX_HZ,
    num_points: int = SWEEP_POINTS,
) -> np.ndarray:
    """Logarithmically-spaced frequencies (Hz), both endpoints included."""
    if f_min <= 0 or f_max <= 0:
        raise ValueError(f"Frequency bounds must be positive, got {f_min}..{f_max} Hz")
    if num_points <= 0:
        return np.array([])
    if num_points == 1:
        return np.array([float(f_min)])
    return np.logspace(np.log10(f_min), np.log10(f_max), num_points)


def to_db(value: float) -> float:
    """20·log10 with a floor so silence maps to −200 dB instead of −inf."""
    return 20 * math.log10(max(value, DB_FLOOR))


# --- Element impedances ---

def compute_series_rl(resistance: float, inductance: float, frequency: float) -> Complex:
    """R + jωL."""
    omega = 2 * math.pi * frequency
    return Complex(resistance, omega * inductance)


def compute_capacitor_impedance(capacitance: float, frequency: float) -> Complex:
    """1/(jωC) = −j/(ωC); open circuit for C ≤ 0 or f ≤ 0."""
    if capacitance <= 0 or frequency <= 0:
        return OPEN_CIRCUIT
    omega = 2 * math.pi * frequency
    return Complex(0.0, -1.0 / (omega * capacitance))


def compute_coil_impedance(
    resistance: float,
    inductance: float,
    capacitance: float,
    frequency: float,
) -> Complex:
    """Series RL branch in parallel with the winding capacitance."""
    z_rl = compute_series_rl(resistance, inductance, frequency)
    z_c = compute_capacitor_impedance(capacitance, frequency)
    return parallel(z_rl, z_c)


def compute_tone_impedance(
    tone_capacitance: float,
    tone_resistance: float,
    tone_position: float,
    frequency: float,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> Complex:
    """
    Tone control shunt: pot section in series with the tone capacitor.

    Position 0 (full treble) leaves the whole pot in series; position 1
    (full bass) leaves only the minimum track resistance.
    """
    resistance = tone_resistance * (1 - tone_position) + calibration.min_tone_resistance
    z_c = compute_capacitor_impedance(tone_capacitance, frequency)
    return add(Complex(resistance, 0.0), z_c)


def compute_effective_volume_resistance(
    load: LoadParams,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """Volume pot to ground as seen by the pickup, scaled by wiper position."""
    position = load.volume_position
    return load.volume_pot * position + calibration.min_wiper_resistance * (1 - position)


def compute_load_impedance(
    load: LoadParams,
    frequency: float,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> Complex:
    """Volume pot ‖ tone branch ‖ amplifier input ‖ cable capacitance."""
    z_volume = Complex(compute_effective_volume_resistance(load, calibration), 0.0)
    z_tone = compute_tone_impedance(
        load.tone_capacitor, load.tone_pot, load.tone_position, frequency, calibration,
    )
    z_amp = Complex(load.amp_input_impedance, 0.0)
    z_cable = compute_capacitor_impedance(compute_cable_capacitance(load), frequency)

    z = parallel(z_volume, z_tone)
    z = parallel(z, z_amp)
    return parallel(z, z_cable)


def compute_cable_capacitance(load: LoadParams) -> float:
    return load.cable_length * load.cable_capacitance_per_meter


def compute_transfer_function(z_source: Complex, z_load: Complex) -> Complex:
    """Voltage divider Z_load / (Z_source + Z_load)."""
    if z_load.is_open:
        return Complex(1.0, 0.0)
    if z_source.is_open:
        return Complex(0.0, 0.0)
    return divide(z_load, add(z_source, z_load))


# --- Array forms over a sweep ---

OPEN_ARRAY_VALUE = complex(OPEN_CIRCUIT)


def angular_frequencies(frequencies) -> np.ndarray:
    """ω = 2πf as a float array."""
    return 2 * np.pi * np.asarray(frequencies, dtype=float)


def parallel_array(z1: np.ndarray, z2: np.ndarray) -> np.ndarray:
    """Element-wise Z1‖Z2 with the same open-branch rules as ``phasor.parallel``."""
    z1, z2 = np.broadcast_arrays(np.asarray(z1, dtype=complex), np.asarray(z2, dtype=complex))
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        total = z1 + z2
        z = z1 * z2 / total
    z = np.where(total == 0, OPEN_ARRAY_VALUE, z)
    z = np.where(np.isinf(z2), z1, z)
    return np.where(np.isinf(z1), z2, z)


def compute_capacitor_impedance_array(capacitance: float, omega: np.ndarray) -> np.ndarray:
    """1/(jωC) per point; open where C ≤ 0 or ω ≤ 0."""
    omega = np.asarray(omega, dtype=float)
    z = np.full(omega.shape, OPEN_ARRAY_VALUE, dtype=complex)
    if capacitance <= 0:
        return z
    driven = omega > 0
    z[driven] = 1.0 / (1j * omega[driven] * capacitance)
    return z


def compute_coil_impedance_array(
    resistance: float,
    inductance: float,
    capacitance: float,
    omega: np.ndarray,
) -> np.ndarray:
    z_rl = resistance + 1j * np.asarray(omega, dtype=float) * inductance
    return parallel_array(z_rl, compute_capacitor_impedance_array(capacitance, omega))


def compute_load_impedance_array(
    load: LoadParams,
    omega: np.ndarray,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> np.ndarray:
    """Array form of ``compute_load_impedance``."""
    tone_resistance = load.tone_pot * (1 - load.tone_position) + calibration.min_tone_resistance
    z_tone = tone_resistance + compute_capacitor_impedance_array(load.tone_capacitor, omega)
    z_cable = compute_capacitor_impedance_array(compute_cable_capacitance(load), omega)

    z = parallel_array(compute_effective_volume_resistance(load, calibration), z_tone)
    z = parallel_array(z, load.amp_input_impedance)
    return parallel_array(z, z_cable)


def compute_transfer_function_array(z_source: np.ndarray, z_load: np.ndarray) -> np.ndarray:
    """Z_load / (Z_source + Z_load) per point. An open load passes 1, an open source 0."""
    z_source, z_load = np.broadcast_arrays(
        np.asarray(z_source, dtype=complex), np.asarray(z_load, dtype=complex),
    )
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        total = z_source + z_load
        h = z_load / total
    h = np.where(total == 0, OPEN_ARRAY_VALUE, h)
    h = np.where(np.isinf(z_source), 0j, h)
    return np.where(np.isinf(z_load), 1 + 0j, h)


# --- Sweeps ---

def compute_impedance_curve(
    resistance: float,
    inductance: float,
    capacitance: float,
    frequencies: np.ndarray,
) -> List[ImpedancePoint]:
    """Coil impedance |Z| and phase across frequency."""
    freqs = np.asarray(frequencies, dtype=float)
    z = compute_coil_impedance_array(resistance, inductance, capacitance, angular_frequencies(freqs))
    mags = np.abs(z)
    phases = np.degrees(np.angle(z))
    return [
        ImpedancePoint(
            frequency=float(f), magnitude=float(m), phase_deg=float(p), real=float(zi.real), imag=float(zi.imag),
        )
        for f, m, p, zi in zip(freqs, mags, phases, z)
    ]


def build_frequency_points(
    frequencies: np.ndarray,
    transfers: np.ndarray,
    gain: float,
    reference: Optional[float],
) -> List[FrequencyPoint]:
    """Scale |H| by `gain`, then divide by `reference` when one is given."""
    transfers = np.asarray(transfers, dtype=complex)
    mags = np.abs(transfers) * gain
    if reference is not None and reference > 0:
        mags = mags / reference
    db = 20 * np.log10(np.maximum(mags, DB_FLOOR))
    phases = np.degrees(np.angle(transfers))
    return [
        FrequencyPoint(frequency=float(f), magnitude=float(m), magnitude_db=float(d), phase_deg=float(p))
        for f, m, d, p in zip(np.asarray(frequencies, dtype=float), mags, db, phases)
    ]


def compute_system_response(
    resistance: float,
    inductance: float,
    capacitance: float,
    load: LoadParams,
    frequencies: np.ndarray,
    reference_frequency: Optional[float] = REFERENCE_FREQUENCY,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> List[FrequencyPoint]:
    """
    Loaded coil frequency response.

    Args:
        resistance: Coil DC resistance (Ohms).
        inductance: Coil inductance (H).
        capacitance: Coil capacitance (F).
        load: Pots, cable and amplifier.
        frequencies: Frequencies to evaluate (Hz).
        reference_frequency: Magnitudes are reported relative to the response
            at this frequency. None reports the raw divider ratio.

    Returns:
        One FrequencyPoint per input frequency.
    """
    def transfer(freqs) -> np.ndarray:
        omega = angular_frequencies(freqs)
        z_coil = compute_coil_impedance_array(resistance, inductance, capacitance, omega)
        z_load = compute_load_impedance_array(load, omega, calibration)
        return compute_transfer_function_array(z_coil, z_load)

    reference = None
    if reference_frequency is not None:
        reference = float(np.abs(transfer([reference_frequency]))[0])

    return build_frequency_points(frequencies, transfer(frequencies), 1.0, reference)


def compute_full_system_response(
    resistance: float,
    inductance: float,
    capacitance: float,
    load: LoadParams,
    frequencies: np.ndarray,
    transformer: Optional[TransformerParams] = None,
    reference_frequency: Optional[float] = REFERENCE_FREQUENCY,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> List[FrequencyPoint]:
    """System response, routed through the transformer when one is enabled."""
    if transformer is not None and transformer.enabled:
        from pickup_engine.transformer import compute_system_response_with_transformer

        return compute_system_response_with_transformer(
            resistance, inductance, capacitance, transformer, load, frequencies,
            reference_frequency=reference_frequency, calibration=calibration,
        )
    return compute_system_response(
        resistance, inductance, capacitance, load, frequencies,
        reference_frequency=reference_frequency, calibration=calibration,
    )


# --- Loaded resonance ---

def _half_power_crossings(freqs: np.ndarray, mags: np.ndarray, peak_idx: int, target: float):
    """Interpolated −3 dB frequencies either side of the peak (None when not reached)."""
    lower = None
    for i in range(peak_idx, -1, -1):
        if mags[i] < target:
            if i < peak_idx:
                t = (target - mags[i]) / (mags[i + 1] - mags[i])
                lower = freqs[i] + t * (freqs[i + 1] - freqs[i])
            else:
                lower = freqs[i]
            break

    upper = None
    for i in range(peak_idx, len(mags)):
        if mags[i] < target:
            if i > peak_idx:
                t = (target - mags[i - 1]) / (mags[i] - mags[i - 1])
                upper = freqs[i - 1] + t * (freqs[i] - freqs[i - 1])
            else:
                upper = freqs[i]
            break

    return lower, upper


def compute_loaded_resonance_and_q(
    resistance: float,
    inductance: float,
    capacitance: float,
    load: LoadParams,
    transformer: Optional[TransformerParams] = None,
    num_points: int = SWEEP_POINTS,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> LoadedResonance:
    """
    Locate the loaded response peak on a 20 Hz–100 kHz sweep.

    Q = f_peak / (f_upper − f_lower) from the interpolated half-power points.
    When only one side crosses −3 dB the bandwidth is taken as symmetric;
    when neither does, the full sweep span bounds it. Q is clamped to the
    calibrated loaded range.
    """
    freqs = generate_log_frequencies(SWEEP_MIN_HZ, SWEEP_MAX_HZ, num_points)
    response = compute_full_system_response(
        resistance, inductance, capacitance, load, freqs,
        transformer=transformer, reference_frequency=None, calibration=calibration,
    )
    mags = np.array([p.magnitude for p in response])

    q_min = calibration.loaded_q_min
    q_max = calibration.loaded_q_max

    peak_idx = int(np.argmax(mags))
    peak_mag = mags[peak_idx]
    if not peak_mag > 0:
        logger.debug("Loaded response is silent across the sweep, no resonance")
        return LoadedResonance(loaded_resonance=0.0, loaded_q=q_min)

    f_peak = float(freqs[peak_idx])
    lower, upper = _half_power_crossings(freqs, mags, peak_idx, peak_mag / math.sqrt(2))

    if lower is not None and upper is not None:
        bandwidth = upper - lower
    elif lower is not None:
        bandwidth = 2 * (f_peak - lower)
    elif upper is not None:
        bandwidth = 2 * (upper - f_peak)
    else:
        logger.debug("No half-power points around %.0f Hz, bounding Q by the sweep span", f_peak)
        bandwidth = float(freqs[-1] - freqs[0])

    q = f_peak / bandwidth if bandwidth > 0 else 1.0
    q = max(q_min, min(q, q_max))
    return LoadedResonance(loaded_resonance=f_peak, loaded_q=q)


def compute_load_results(
    coil: CoilComputedResults,
    load: LoadParams,
    transformer: Optional[TransformerParams] = None,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> LoadComputedResults:
    """Loaded figures of merit for a coil driving `load` (optionally via a transformer)."""
    cable_capacitance = compute_cable_capacitance(load)

    volume = compute_effective_volume_resistance(load, calibration)
    amp = load.amp_input_impedance
    effective_resistance = volume * amp / (volume + amp) if volume + amp > 0 else 0.0

    loaded = compute_loaded_resonance_and_q(
        coil.dc_resistance, coil.inductance, coil.capacitance, load,
        transformer=transformer, calibration=calibration,
    )

    # Resistive divider against the coil's series impedance at 1 kHz
    z_coil = magnitude(compute_series_rl(coil.dc_resistance, coil.inductance, REFERENCE_FREQUENCY))
    total = effective_resistance + z_coil
    output_at_1khz = effective_resistance / total if total > 0 else 0.0

    brightness = (loaded.loaded_resonance - 2000) / 8000
    brightness = max(0.0, min(1.0, brightness))

    return LoadComputedResults(
        total_cable_capacitance=cable_capacitance,
        effective_load_resistance=effective_resistance,
        loaded_resonance=loaded.loaded_resonance,
        loaded_q=loaded.loaded_q,
        output_at_1khz=output_at_1khz,
        brightness_index=brightness,
    )


def compute_transient_characteristics(resonant_frequency: float, q: float) -> TransientCharacteristics:
    """
    Ringing of a second-order resonance, closed form.

    τ = Q/(π·f0); the envelope reaches 10% after τ·ln(10).
    """
    if q < 1.5:
        attack = "Very soft (overdamped)"
    elif q < 2.5:
        attack = "Soft (damped)"
    elif q < 4:
        attack = "Balanced"
    elif q < 6:
        attack = "Snappy"
    else:
        attack = "Glassy (ringing)"

    if resonant_frequency <= 0:
        return TransientCharacteristics(
            decay_time_ms=0.0, ringing_period_ms=0.0, ringing_cycles=0.0, attack_description=attack,
        )

    tau = q / (math.pi * resonant_frequency)
    decay_ms = tau * math.log(10) * 1000  # s → ms
    period_ms = 1000 / resonant_frequency
    return TransientCharacteristics(
        decay_time_ms=decay_ms,
        ringing_period_ms=period_ms,
        ringing_cycles=decay_ms / period_ms,
        attack_description=attack,
    )
