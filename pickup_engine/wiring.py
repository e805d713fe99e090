"""
Two-coil wiring (humbuckers, split and stacked coils).

Mutual inductance from a coupling coefficient:
    M = k·√(L1·L2)

Series:    L = L1 + L2 ± 2M
Parallel:  L = (L1·L2 − M²) / (L1 + L2 ∓ 2M)

Winding capacitances add in both cases; resonance and Q are recomputed
from the combined R, L and C.
"""

import math
from typing import Optional, Union

from pickup_engine.calibration import get_k_mutual
from pickup_engine.coil import compute_q, compute_resonance
from pickup_engine.models import (
    CoilComputedResults,
    CombinedCoilResults,
    PhaseConfig,
    WiringConfig,
)

Coupling = Union[str, float]

DEFAULT_COUPLING = "humbucker_side"


def _coupling_coefficient(coupling: Coupling) -> float:
    if isinstance(coupling, str):
        return get_k_mutual(coupling)
    return float(coupling)


def compute_mutual_inductance(l1: float, l2: float, coupling: float) -> float:
    if l1 <= 0 or l2 <= 0:
        return 0.0
    return coupling * math.sqrt(l1 * l2)


def _combine(
    coil1: CoilComputedResults,
    coil2: CoilComputedResults,
    dc_resistance: float,
    inductance: float,
) -> CoilComputedResults:
    capacitance = coil1.capacitance + coil2.capacitance
    resonant_frequency = compute_resonance(inductance, capacitance)
    return CoilComputedResults(
        mean_turn_length=(coil1.mean_turn_length + coil2.mean_turn_length) / 2,
        total_wire_length=coil1.total_wire_length + coil2.total_wire_length,
        coil_volume=coil1.coil_volume + coil2.coil_volume,
        dc_resistance=dc_resistance,
        inductance=inductance,
        capacitance=capacitance,
        resonant_frequency=resonant_frequency,
        quality_factor=compute_q(resonant_frequency, inductance, dc_resistance),
        max_turns=min(coil1.max_turns, coil2.max_turns),
        computed_outer_radius=max(coil1.computed_outer_radius, coil2.computed_outer_radius),
    )


def compute_series_coils(
    coil1: CoilComputedResults,
    coil2: CoilComputedResults,
    coupling: Coupling = DEFAULT_COUPLING,
    phase: PhaseConfig = PhaseConfig.IN_PHASE,
) -> CoilComputedResults:
    """Series connection; out-of-phase fluxes subtract (inductance floored at 0)."""
    m = compute_mutual_inductance(coil1.inductance, coil2.inductance, _coupling_coefficient(coupling))

    if phase == PhaseConfig.IN_PHASE:
        inductance = coil1.inductance + coil2.inductance + 2 * m
    else:
        inductance = max(coil1.inductance + coil2.inductance - 2 * m, 0.0)

    return _combine(coil1, coil2, coil1.dc_resistance + coil2.dc_resistance, inductance)


def compute_parallel_coils(
    coil1: CoilComputedResults,
    coil2: CoilComputedResults,
    coupling: Coupling = DEFAULT_COUPLING,
    phase: PhaseConfig = PhaseConfig.IN_PHASE,
) -> CoilComputedResults:
    """Parallel connection of two mutually coupled coils."""
    l1 = coil1.inductance
    l2 = coil2.inductance
    m = compute_mutual_inductance(l1, l2, _coupling_coefficient(coupling))

    r1 = coil1.dc_resistance
    r2 = coil2.dc_resistance
    dc_resistance = r1 * r2 / (r1 + r2) if r1 + r2 > 0 else 0.0

    if phase == PhaseConfig.IN_PHASE:
        denominator = l1 + l2 - 2 * m
    else:
        denominator = l1 + l2 + 2 * m
    inductance = (l1 * l2 - m * m) / denominator if denominator > 0 else 0.0

    return _combine(coil1, coil2, dc_resistance, inductance)


def compute_output_multiplier(wiring: WiringConfig, phase: PhaseConfig) -> float:
    """Output relative to a single coil."""
    in_phase = phase == PhaseConfig.IN_PHASE
    if wiring == WiringConfig.SERIES:
        return 2.0 if in_phase else 0.3   # out of phase: partial cancellation, "quacky"
    if wiring == WiringConfig.PARALLEL:
        return 1.0 if in_phase else 0.5
    return 1.0


def compute_combined_coil(
    coil1: CoilComputedResults,
    coil2: Optional[CoilComputedResults],
    wiring: WiringConfig,
    phase: PhaseConfig = PhaseConfig.IN_PHASE,
    coupling: Coupling = DEFAULT_COUPLING,
) -> CombinedCoilResults:
    """Combine two coils per wiring; a single coil (or no second coil) passes through."""
    if wiring == WiringConfig.SINGLE or coil2 is None:
        return CombinedCoilResults(results=coil1, mutual_inductance=0.0, output_multiplier=1.0)

    if wiring == WiringConfig.SERIES:
        results = compute_series_coils(coil1, coil2, coupling, phase)
    else:
        results = compute_parallel_coils(coil1, coil2, coupling, phase)

    return CombinedCoilResults(
        results=results,
        mutual_inductance=compute_mutual_inductance(
            coil1.inductance, coil2.inductance, _coupling_coefficient(coupling),
        ),
        output_multiplier=compute_output_multiplier(wiring, phase),
    )
