"""
Calibration coefficients, material tables and physical constants.

Values that cannot be derived analytically without a field simulation are
empirical defaults calibrated against typical measured pickups:

    C_p ≈ C_BASE · N^0.35 · k_wind · k_pack · k_ins

The sub-linear exponent reflects that only adjacent turns contribute
materially to inter-turn capacitance (a linear law would give ~5000 pF
instead of the measured 80-150 pF).

Every table is a read-only mapping keyed by a closed enumeration, and the
whole set is bundled into a frozen ``Calibration`` record that engine
functions accept as an optional argument.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pickup_engine.models import (
    ConductorMaterial,
    CopperGrade,
    CoreMaterial,
    CoreMaterialVariant,
    InsulationType,
    WindingStyle,
    WireMaterial,
)


MU_0 = 4 * math.pi * 1e-7       # H/m
T_REF = 20.0                     # °C, resistivity reference temperature

COPPER_RESISTIVITY_20C = 1.724e-8   # Ω·m
COPPER_TEMP_COEFFICIENT = 0.00393   # 1/°C


# --- Coefficient records ---

@dataclass(frozen=True)
class WindingStyleCoefficients:
    """k_wind range; scatter has fewer adjacent contacts than layered."""
    min: float
    max: float
    typical: float


@dataclass(frozen=True)
class InsulationSpec:
    name: str
    thickness: float             # mm per side
    dielectric_constant: float
    k_ins: float                 # capacitance factor, thicker film → lower Cp


@dataclass(frozen=True)
class CoreMaterialProperties:
    name: str
    permeability: float          # initial relative permeability µr
    saturation_flux: float       # Bsat (T)
    loss_coefficient: float      # relative, 1.0 = baseline
    description: str = ''


@dataclass(frozen=True)
class AwgSpec:
    awg: int
    bare_diameter: float         # mm
    area: float                  # mm²
    resistance_per_meter: float  # Ω/m at 20 °C, copper


K_WIND = MappingProxyType({
    WindingStyle.SCATTER: WindingStyleCoefficients(min=0.6, max=0.85, typical=0.75),
    WindingStyle.RANDOM: WindingStyleCoefficients(min=0.85, max=1.05, typical=0.95),
    WindingStyle.LAYERED: WindingStyleCoefficients(min=1.1, max=1.4, typical=1.25),
})

INSULATION_TABLE = MappingProxyType({
    InsulationType.PLAIN_ENAMEL: InsulationSpec('Plain Enamel', 0.005, 3.5, 1.0),
    InsulationType.HEAVY_FORMVAR: InsulationSpec('Heavy Formvar', 0.010, 3.2, 0.9),
    InsulationType.POLY: InsulationSpec('Polyurethane', 0.007, 2.3, 0.95),
    InsulationType.POLY_NYLON: InsulationSpec('Poly-Nylon', 0.007, 2.5, 0.93),
    InsulationType.SOLDERABLE: InsulationSpec('Solderable Enamel', 0.005, 3.0, 0.98),
})

# Resistivity relative to standard electrolytic copper
COPPER_GRADE_FACTORS = MappingProxyType({
    CopperGrade.STANDARD: 1.0,
    CopperGrade.OFC: 0.995,
    CopperGrade.OCC: 0.99,
})

WIRE_MATERIAL_FACTORS = MappingProxyType({
    WireMaterial.COPPER: 1.0,
    WireMaterial.SILVER: 0.95,
})

CONDUCTOR_RESISTIVITY_FACTORS = MappingProxyType({
    ConductorMaterial.COPPER: 1.0,
    ConductorMaterial.OFC_COPPER: 0.995,
    ConductorMaterial.SILVER: 0.95,
    ConductorMaterial.ALUMINUM: 1.64,
    ConductorMaterial.BRASS: 3.8,
})

CORE_MATERIALS = MappingProxyType({
    CoreMaterialVariant.NC_IRON: CoreMaterialProperties(
        'Nanocrystalline Fe (Finemet/Vitroperm)', 80000, 1.23, 0.3,
        'Iron-based nanocrystalline. Very high µr, excellent audio performance.'),
    CoreMaterialVariant.NC_COBALT: CoreMaterialProperties(
        'Nanocrystalline Co', 150000, 0.8, 0.25,
        'Cobalt-based nanocrystalline. Highest µr, lower Bsat.'),
    CoreMaterialVariant.AM_IRON: CoreMaterialProperties(
        'Amorphous Fe (Metglas 2605)', 30000, 1.56, 0.5,
        'Iron-based amorphous. High Bsat, good audio performance.'),
    CoreMaterialVariant.AM_COBALT: CoreMaterialProperties(
        'Amorphous Co (Metglas 2714)', 120000, 0.57, 0.35,
        'Cobalt-based amorphous. Very high µr, low Bsat.'),
    CoreMaterialVariant.FERRITE_MNZN: CoreMaterialProperties(
        'MnZn Ferrite', 5000, 0.45, 0.8,
        'Manganese-Zinc ferrite. Low frequency (<2MHz), moderate µr.'),
    CoreMaterialVariant.FERRITE_NIZN: CoreMaterialProperties(
        'NiZn Ferrite', 500, 0.35, 0.6,
        'Nickel-Zinc ferrite. High frequency (>1MHz), lower µr.'),
    CoreMaterialVariant.SILICON_STEEL: CoreMaterialProperties(
        'Grain-Oriented Silicon Steel', 4000, 1.8, 1.5,
        'Traditional laminated steel. High Bsat, higher losses.'),
})

# Mutual coupling presets for two-coil configurations: M = k·√(L1·L2)
K_MUTUAL = MappingProxyType({
    'humbucker_side': 0.75,
    'stacked': 0.92,
    'spaced': 0.25,
})

# ASTM B 258: d = 0.127 · 92^((36-n)/39) mm
AWG_TABLE: Tuple[AwgSpec, ...] = (
    AwgSpec(18, 1.024, 0.823, 0.0209),
    AwgSpec(19, 0.912, 0.653, 0.0264),
    AwgSpec(20, 0.812, 0.518, 0.0333),
    AwgSpec(21, 0.723, 0.411, 0.0420),
    AwgSpec(22, 0.644, 0.326, 0.0530),
    AwgSpec(23, 0.573, 0.258, 0.0668),
    AwgSpec(24, 0.511, 0.205, 0.0842),
    AwgSpec(25, 0.455, 0.162, 0.106),
    AwgSpec(26, 0.405, 0.129, 0.134),
    AwgSpec(27, 0.361, 0.102, 0.169),
    AwgSpec(28, 0.321, 0.0810, 0.213),
    AwgSpec(29, 0.286, 0.0642, 0.268),
    AwgSpec(30, 0.255, 0.0510, 0.338),
    AwgSpec(31, 0.227, 0.0404, 0.426),
    AwgSpec(32, 0.202, 0.0320, 0.538),
    AwgSpec(33, 0.180, 0.0254, 0.679),
    AwgSpec(34, 0.160, 0.0201, 0.856),
    AwgSpec(35, 0.143, 0.0160, 1.08),
    AwgSpec(36, 0.127, 0.0127, 1.36),
    AwgSpec(37, 0.113, 0.0100, 1.72),
    # Standard pickup wire
    AwgSpec(38, 0.1016, 0.00811, 2.127),
    AwgSpec(39, 0.0897, 0.00632, 2.729),
    AwgSpec(40, 0.0787, 0.00487, 3.543),
    AwgSpec(41, 0.0711, 0.00397, 4.345),
    AwgSpec(42, 0.0635, 0.00317, 5.443),
    AwgSpec(43, 0.0559, 0.00245, 7.035),
    AwgSpec(44, 0.0508, 0.00203, 8.498),
    AwgSpec(45, 0.0445, 0.00156, 11.07),
    AwgSpec(46, 0.0396, 0.00123, 14.00),
)

_AWG_INDEX = MappingProxyType({spec.awg: spec for spec in AWG_TABLE})


@dataclass(frozen=True)
class Calibration:
    """Process-wide read-only model constants."""
    capacitance_base_pf: float = 8.0
    capacitance_exponent: float = 0.35
    wire_length_slack: float = 1.03           # layer buildup / winding irregularity
    flatwork_length_factor: float = 0.92      # winding stops short of bobbin edges
    flatwork_default_length: float = 80.0     # mm
    flatwork_inductance_factor: float = 1.12  # Wheeler underestimates flat coils
    min_wiper_resistance: float = 1000.0      # Ω, volume pot at zero
    min_tone_resistance: float = 1.0          # Ω, tone pot at full bass
    loaded_q_min: float = 0.5
    loaded_q_max: float = 10.0
    k_wind: Mapping[WindingStyle, WindingStyleCoefficients] = field(default_factory=lambda: K_WIND)
    insulation: Mapping[InsulationType, InsulationSpec] = field(default_factory=lambda: INSULATION_TABLE)
    copper_grades: Mapping[CopperGrade, float] = field(default_factory=lambda: COPPER_GRADE_FACTORS)
    wire_materials: Mapping[WireMaterial, float] = field(default_factory=lambda: WIRE_MATERIAL_FACTORS)
    conductors: Mapping[ConductorMaterial, float] = field(default_factory=lambda: CONDUCTOR_RESISTIVITY_FACTORS)
    core_materials: Mapping[CoreMaterialVariant, CoreMaterialProperties] = field(default_factory=lambda: CORE_MATERIALS)


DEFAULT_CALIBRATION = Calibration()


def get_k_wind(style: WindingStyle, calibration: Calibration = DEFAULT_CALIBRATION) -> float:
    return calibration.k_wind[WindingStyle(style)].typical


def get_k_ins(insulation: InsulationType, calibration: Calibration = DEFAULT_CALIBRATION) -> float:
    return calibration.insulation[InsulationType(insulation)].k_ins


def get_k_pack(packing_factor: float) -> float:
    """k_pack = 0.7 + 1.0·(packing − 0.5); 0.7 at 0.5 packing, 1.1 at 0.9."""
    return 0.7 + 1.0 * (packing_factor - 0.5)


def get_copper_resistivity(
    temperature: float,
    grade: CopperGrade = CopperGrade.STANDARD,
    material: WireMaterial = WireMaterial.COPPER,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """Resistivity (Ω·m) at temperature, linear coefficient referenced to 20 °C."""
    base = (
        COPPER_RESISTIVITY_20C
        * calibration.copper_grades[CopperGrade(grade)]
        * calibration.wire_materials[WireMaterial(material)]
    )
    return base * (1 + COPPER_TEMP_COEFFICIENT * (temperature - T_REF))


def get_insulated_diameter(
    bare_diameter: float,
    insulation: InsulationType,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> float:
    """Bare diameter plus insulation film on both sides (mm)."""
    spec = calibration.insulation.get(InsulationType(insulation))
    if spec is None:
        return bare_diameter
    return bare_diameter + 2 * spec.thickness


def get_core_material_properties(
    material: CoreMaterial,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> CoreMaterialProperties:
    return calibration.core_materials[material.key]


def get_awg_spec(awg: int) -> Optional[AwgSpec]:
    return _AWG_INDEX.get(awg)


def awg_from_diameter(diameter: float, tolerance: float = 0.002) -> Optional[int]:
    """Match a bare diameter (mm) to its AWG gauge, or None."""
    for spec in AWG_TABLE:
        if abs(spec.bare_diameter - diameter) <= tolerance:
            return spec.awg
    return None


def awg_diameter(awg: int) -> float:
    """Bare diameter (mm) of any gauge from the ASTM B 258 formula."""
    return 0.127 * 92 ** ((36 - awg) / 39)


def get_k_mutual(config: str) -> float:
    if config not in K_MUTUAL:
        raise ValueError(f"Unknown coupling preset '{config}'. Must be one of: {list(K_MUTUAL.keys())}")
    return K_MUTUAL[config]
