"""
Pickup coil electrical model: geometry + wire → R, L, C, f0, Q.

Geometry is in millimetres, wire lengths in metres, electrical values in SI.

DC resistance:
    Rdc = ρ(T) · ℓ / A,   ρ(T) = ρ20 · (1 + α·(T − 20))

Inductance, Wheeler's multi-layer approximation (r, l in inches):
    L[µH] = r²·N² / (9r + 10l)

Parasitic capacitance, calibrated sub-linear model:
    Cp = C_BASE · N^0.35 · k_wind · k_pack · k_ins

Self-resonance and unloaded Q:
    f0 = 1 / (2π√(LC)),   Q = 2π·f0·L / R

References:
    H. A. Wheeler, "Simple Inductance Formulas for Radio Coils", Proc. IRE, 1928.
"""

import math

from pickup_engine.calibration import (
    DEFAULT_CALIBRATION,
    MU_0,
    Calibration,
    get_copper_resistivity,
    get_insulated_diameter,
    get_k_ins,
    get_k_pack,
    get_k_wind,
)
from pickup_engine.models import (
    CoilComputedResults,
    CoilForm,
    CoilGeometry,
    CopperGrade,
    InsulationType,
    WindingStyle,
    WireMaterial,
    WireParams,
)


MM_PER_INCH = 25.4


class InvalidGeometryError(ValueError):
    """A physical quantity that must be positive is not."""


# --- Geometry ---

def compute_mean_turn_length(
    geometry: CoilGeometry,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """
    Mean length of one turn (m).

    Cylindrical: circumference at the mean radius.
    Rectangular: perimeter 2·(width + length), width = outer − inner.
    Flatwork: racetrack perimeter 2·L_eff + W_mean·(π − 2).
    Zero geometry gives 0.
    """
    inner = geometry.inner_radius
    outer = geometry.outer_radius

    if geometry.form == CoilForm.CYLINDRICAL:
        mean_radius = (inner + outer) / 2
        if mean_radius <= 0:
            return 0.0
        return 2 * math.pi * mean_radius * 1e-3  # mm → m

    if geometry.form == CoilForm.RECTANGULAR:
        width = outer - inner
        length = geometry.length or geometry.height
        if width <= 0 and length <= 0:
            return 0.0
        return 2 * (width + length) * 1e-3

    # Flatwork
    length = geometry.length or calibration.flatwork_default_length
    effective_length = length * calibration.flatwork_length_factor
    mean_width = (inner + outer) / 2
    return (2 * effective_length + mean_width * (math.pi - 2)) * 1e-3


def compute_total_wire_length(
    turns: int,
    mean_turn_length: float,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """Total wire length (m), including the winding slack factor."""
    return turns * mean_turn_length * calibration.wire_length_slack


def compute_winding_area(geometry: CoilGeometry) -> float:
    """Winding cross-section (mm²): annulus for cylindrical, rectangle otherwise."""
    inner = geometry.inner_radius
    outer = geometry.outer_radius
    if geometry.form == CoilForm.CYLINDRICAL:
        return math.pi * (outer * outer - inner * inner)
    width = outer - inner
    length = geometry.length or geometry.height
    return width * length


def compute_equivalent_radius(area: float) -> float:
    """Radius of the circle with the same area: √(A/π)."""
    if area <= 0:
        return 0.0
    return math.sqrt(area / math.pi)


def compute_coil_volume(geometry: CoilGeometry) -> float:
    """Winding volume (mm³): hollow cylinder or box."""
    if geometry.form == CoilForm.CYLINDRICAL:
        outer = geometry.outer_radius
        inner = geometry.inner_radius
        return math.pi * (outer * outer - inner * inner) * geometry.height
    width = geometry.outer_radius - geometry.inner_radius
    length = geometry.length or geometry.height
    return width * length * geometry.height


# --- Resistance ---

def compute_rdc(
    wire_length: float,
    wire_diameter: float,
    temperature: float = 20.0,
    copper_grade: CopperGrade = CopperGrade.STANDARD,
    material: WireMaterial = WireMaterial.COPPER,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """
    DC resistance of a round wire.

    Args:
        wire_length: Wire length (m).
        wire_diameter: Bare diameter (mm).
        temperature: Operating temperature (°C).
        copper_grade: Purity grade, scales resistivity.
        material: Conductor metal.

    Returns:
        Resistance (Ohms).

    Raises:
        InvalidGeometryError: If the wire diameter is not positive.
    """
    if wire_diameter <= 0:
        raise InvalidGeometryError(f"Invalid wire diameter: {wire_diameter} mm")

    resistivity = get_copper_resistivity(temperature, copper_grade, material, calibration)
    area = math.pi * (wire_diameter / 2) ** 2 * 1e-6  # mm² → m²
    return resistivity * wire_length / area


# --- Inductance ---

def compute_inductance(
    geometry: CoilGeometry,
    turns: int,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """
    Wheeler inductance (H) of a multi-layer air-core coil.

    Cylindrical coils use the mean radius; rectangular and flatwork coils
    use the radius of a circle with the same winding area. Flatwork adds a
    calibration factor since Wheeler underestimates very flat coils.
    """
    if geometry.form == CoilForm.CYLINDRICAL:
        radius_mm = (geometry.inner_radius + geometry.outer_radius) / 2
    else:
        radius_mm = compute_equivalent_radius(compute_winding_area(geometry))

    r = radius_mm / MM_PER_INCH
    l = geometry.height / MM_PER_INCH
    denom = 9 * r + 10 * l
    if r <= 0 or denom <= 0:
        return 0.0

    inductance = (r * r * turns * turns) / denom * 1e-6  # µH → H

    if geometry.form == CoilForm.FLATWORK:
        inductance *= calibration.flatwork_inductance_factor
    return inductance


def compute_solenoid_inductance(geometry: CoilGeometry, turns: int) -> float:
    """Long-solenoid inductance μ0·N²·A/l (H), for comparison against Wheeler."""
    if geometry.height <= 0:
        return 0.0
    area = compute_winding_area(geometry) * 1e-6  # mm² → m²
    return MU_0 * turns * turns * area / (geometry.height * 1e-3)


# --- Capacitance ---

def compute_capacitance(
    turns: int,
    winding_style: WindingStyle = WindingStyle.SCATTER,
    packing_factor: float = 0.7,
    insulation: InsulationType = InsulationType.PLAIN_ENAMEL,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """
    Parasitic winding capacitance (F).

    Calibrated so that 5000 turns ≈ 90 pF and 10000 turns ≈ 120 pF for a
    typical scatter-wound coil. The N^0.35 law keeps capacitance well below
    proportional growth in turns.
    """
    if turns <= 0:
        return 0.0
    c_pf = (
        calibration.capacitance_base_pf
        * turns ** calibration.capacitance_exponent
        * get_k_wind(winding_style, calibration)
        * get_k_pack(packing_factor)
        * get_k_ins(insulation, calibration)
    )
    return c_pf * 1e-12  # pF → F


# --- Resonance ---

def compute_resonance(inductance: float, capacitance: float) -> float:
    """Self-resonant frequency (Hz), 0 when L or C is not positive."""
    if inductance <= 0 or capacitance <= 0:
        return 0.0
    return 1.0 / (2 * math.pi * math.sqrt(inductance * capacitance))


def compute_q(resonant_frequency: float, inductance: float, resistance: float) -> float:
    """Unloaded Q = ω0·L/R; infinite for a lossless coil."""
    if resistance <= 0:
        return math.inf
    return 2 * math.pi * resonant_frequency * inductance / resistance


# --- Bobbin capacity ---

def compute_max_turns(
    geometry: CoilGeometry,
    wire_diameter: float,
    insulation: InsulationType = InsulationType.PLAIN_ENAMEL,
    packing_factor: float = 0.7,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> int:
    """Turns that fit the winding window at the given packing factor."""
    total_diameter = get_insulated_diameter(wire_diameter, insulation, calibration)
    if total_diameter <= 0:
        return 0

    wall = geometry.bobbin_thickness or 0.0
    width = geometry.outer_radius - geometry.inner_radius - 2 * wall
    height = geometry.height - 2 * wall
    if width <= 0 or height <= 0:
        return 0

    wire_area = math.pi * (total_diameter / 2) ** 2
    return math.floor(width * height * packing_factor / wire_area)


def compute_outer_radius(
    inner: float,
    height: float,
    turns: int,
    wire_diameter: float,
    insulation: InsulationType = InsulationType.PLAIN_ENAMEL,
    packing_factor: float = 0.7,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """
    Outer radius (or width) reached by winding `turns` from `inner` (mm).

    Layers stack radially; only multi-layer coils pay the packing gap.
    """
    total_diameter = get_insulated_diameter(wire_diameter, insulation, calibration)
    if total_diameter <= 0 or height <= 0 or turns <= 0:
        return inner

    turns_per_layer = max(1, math.floor(height * packing_factor / total_diameter))
    layers = math.ceil(turns / turns_per_layer)

    if layers == 1:
        build_up = total_diameter
    else:
        build_up = layers * total_diameter / math.sqrt(packing_factor)
    return inner + build_up


# --- Composition ---

def compute_coil_results(
    geometry: CoilGeometry,
    wire: WireParams,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> CoilComputedResults:
    """
    Compute the full electrical snapshot of a single coil.

    Raises:
        InvalidGeometryError: If the wire diameter is not positive.
    """
    mean_turn_length = compute_mean_turn_length(geometry, calibration)
    total_wire_length = compute_total_wire_length(wire.turns, mean_turn_length, calibration)

    dc_resistance = compute_rdc(
        total_wire_length,
        wire.wire_diameter,
        wire.temperature,
        wire.copper_grade,
        wire.material,
        calibration,
    )
    inductance = compute_inductance(geometry, wire.turns, calibration)
    capacitance = compute_capacitance(
        wire.turns, wire.winding_style, wire.packing_factor, wire.insulation, calibration,
    )
    resonant_frequency = compute_resonance(inductance, capacitance)
    quality_factor = compute_q(resonant_frequency, inductance, dc_resistance)

    max_turns = compute_max_turns(
        geometry, wire.wire_diameter, wire.insulation, wire.packing_factor, calibration,
    )
    computed_outer_radius = compute_outer_radius(
        geometry.inner_radius,
        geometry.height,
        wire.turns,
        wire.wire_diameter,
        wire.insulation,
        wire.packing_factor,
        calibration,
    )

    return CoilComputedResults(
        mean_turn_length=mean_turn_length,
        total_wire_length=total_wire_length,
        coil_volume=compute_coil_volume(geometry),
        dc_resistance=dc_resistance,
        inductance=inductance,
        capacitance=capacitance,
        resonant_frequency=resonant_frequency,
        quality_factor=quality_factor,
        max_turns=max_turns,
        computed_outer_radius=computed_outer_radius,
        solenoid_inductance=compute_solenoid_inductance(geometry, wire.turns),
    )
