"""Parameter and result models for the pickup compute engine."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Enums ---

class CoilForm(str, Enum):
    CYLINDRICAL = "cylindrical"
    RECTANGULAR = "rectangular"
    FLATWORK = "flatwork"


class WireMaterial(str, Enum):
    COPPER = "copper"
    SILVER = "silver"


class CopperGrade(str, Enum):
    STANDARD = "standard"   # electrolytic, 99.9%
    OFC = "ofc"             # oxygen-free, 99.99%
    OCC = "occ"             # Ohno continuous cast


class StrandType(str, Enum):
    SOLID = "solid"
    STRANDED = "stranded"
    LITZ = "litz"


class InsulationType(str, Enum):
    PLAIN_ENAMEL = "plain_enamel"
    HEAVY_FORMVAR = "heavy_formvar"
    POLY = "poly"
    POLY_NYLON = "poly_nylon"
    SOLDERABLE = "solderable"


class InsulationClass(str, Enum):
    A = "A"     # 105 °C
    B = "B"     # 130 °C
    F = "F"     # 155 °C
    H = "H"     # 180 °C
    N = "N"     # 200 °C


class WindingStyle(str, Enum):
    SCATTER = "scatter"
    RANDOM = "random"
    LAYERED = "layered"


class WiringConfig(str, Enum):
    SINGLE = "single"
    SERIES = "series"
    PARALLEL = "parallel"


class PhaseConfig(str, Enum):
    IN_PHASE = "in_phase"
    OUT_OF_PHASE = "out_of_phase"


class CoreShape(str, Enum):
    TOROID_ROUND = "toroid_round"
    TOROID_OVAL = "toroid_oval"
    C_CORE = "c_core"
    EI_CORE = "ei_core"


class CoreMaterialBase(str, Enum):
    NANOCRYSTALLINE = "nanocrystalline"
    AMORPHOUS = "amorphous"
    FERRITE = "ferrite"
    SILICON_STEEL = "silicon_steel"


class CoreMaterialVariant(str, Enum):
    NC_IRON = "nc_iron"
    NC_COBALT = "nc_cobalt"
    AM_IRON = "am_iron"
    AM_COBALT = "am_cobalt"
    FERRITE_MNZN = "ferrite_mnzn"
    FERRITE_NIZN = "ferrite_nizn"
    SILICON_STEEL = "silicon_steel"


class PrimaryWindingType(str, Enum):
    WIRE = "wire"
    PLATE = "plate"


class ConductorMaterial(str, Enum):
    COPPER = "copper"
    OFC_COPPER = "ofc_copper"
    SILVER = "silver"
    ALUMINUM = "aluminum"
    BRASS = "brass"


class TransformerWindingStyle(str, Enum):
    INTERLEAVED = "interleaved"
    NON_INTERLEAVED = "non_interleaved"


class CoreLoss(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MagnetType(str, Enum):
    ALNICO2 = "alnico2"
    ALNICO3 = "alnico3"
    ALNICO5 = "alnico5"
    ALNICO8 = "alnico8"
    FERRITE = "ferrite"
    NEODYMIUM = "neodymium"


class CoverType(str, Enum):
    NONE = "none"
    NICKEL_SILVER = "nickel_silver"
    CHROME = "chrome"
    PLASTIC = "plastic"


class StringMaterial(str, Enum):
    NICKEL = "nickel"
    STEEL = "steel"


class StringPullWarning(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"


class MessageLevel(str, Enum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


# Variants allowed for each material family
CORE_VARIANTS = {
    CoreMaterialBase.NANOCRYSTALLINE: (CoreMaterialVariant.NC_IRON, CoreMaterialVariant.NC_COBALT),
    CoreMaterialBase.AMORPHOUS: (CoreMaterialVariant.AM_IRON, CoreMaterialVariant.AM_COBALT),
    CoreMaterialBase.FERRITE: (CoreMaterialVariant.FERRITE_MNZN, CoreMaterialVariant.FERRITE_NIZN),
    CoreMaterialBase.SILICON_STEEL: (CoreMaterialVariant.SILICON_STEEL,),
}


# --- Coil ---

class CoilGeometry(BaseModel):
    """Bobbin/winding window. Radii double as widths for rectangular and flatwork forms."""
    form: CoilForm = CoilForm.CYLINDRICAL
    inner_radius: float = Field(..., ge=0, description="Inner radius, or inner width (mm)")
    outer_radius: float = Field(..., ge=0, description="Outer radius, or outer width (mm)")
    height: float = Field(..., ge=0, description="Winding height (mm)")
    length: Optional[float] = Field(None, ge=0, description="Coil length for rectangular/flatwork forms (mm)")
    bobbin_thickness: Optional[float] = Field(None, ge=0, description="Bobbin wall thickness (mm)")


class WireParams(BaseModel):
    material: WireMaterial = WireMaterial.COPPER
    copper_grade: CopperGrade = CopperGrade.STANDARD
    strand_type: StrandType = StrandType.SOLID
    strand_count: Optional[int] = Field(None, ge=1, description="Strand count for stranded/litz wire")
    wire_diameter: float = Field(..., description="Bare wire diameter (mm)")
    insulation: InsulationType = InsulationType.PLAIN_ENAMEL
    insulation_class: InsulationClass = InsulationClass.A
    turns: int = Field(..., description="Number of turns")
    winding_style: WindingStyle = WindingStyle.SCATTER
    packing_factor: float = Field(0.7, ge=0, le=1, description="Copper fill of the winding window (0-1)")
    temperature: float = Field(20.0, description="Operating temperature (°C)")


class CoilComputedResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    mean_turn_length: float = Field(..., description="Mean turn length (m)")
    total_wire_length: float = Field(..., description="Total wire length (m)")
    coil_volume: float = Field(..., description="Winding volume (mm³)")
    dc_resistance: float = Field(..., description="DC resistance (Ohms)")
    inductance: float = Field(..., description="Inductance (H)")
    capacitance: float = Field(..., description="Parasitic capacitance (F)")
    resonant_frequency: float = Field(..., description="Self-resonant frequency (Hz)")
    quality_factor: float = Field(..., description="Unloaded Q at resonance")
    max_turns: int = Field(..., description="Estimated bobbin capacity (turns)")
    computed_outer_radius: float = Field(..., description="Outer radius/width from layer build-up (mm)")
    solenoid_inductance: Optional[float] = Field(
        None, description="Long-solenoid inductance for comparison with Wheeler (H); single coils only",
    )


class CombinedCoilResults(BaseModel):
    """Two coils wired together."""
    model_config = ConfigDict(frozen=True)

    results: CoilComputedResults
    mutual_inductance: float = Field(..., description="Mutual inductance (H)")
    output_multiplier: float = Field(..., description="Relative output vs a single coil")


# --- Load ---

class LoadParams(BaseModel):
    volume_pot: float = Field(500_000.0, ge=0, description="Volume pot value (Ohms)")
    volume_position: float = Field(1.0, ge=0, le=1, description="Volume wiper position (0 = off, 1 = full)")
    tone_pot: float = Field(500_000.0, ge=0, description="Tone pot value (Ohms)")
    tone_capacitor: float = Field(22e-9, ge=0, description="Tone capacitor (F)")
    tone_position: float = Field(0.0, ge=0, le=1, description="Tone position (0 = full treble, 1 = full bass)")
    cable_capacitance_per_meter: float = Field(100e-12, ge=0, description="Cable capacitance (F/m)")
    cable_length: float = Field(3.0, ge=0, description="Cable length (m)")
    amp_input_impedance: float = Field(1_000_000.0, ge=0, description="Amplifier input impedance (Ohms)")


class LoadComputedResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_cable_capacitance: float = Field(..., description="Total cable capacitance (F)")
    effective_load_resistance: float = Field(..., description="Volume pot ‖ amplifier input (Ohms)")
    loaded_resonance: float = Field(..., description="Loaded resonance (Hz)")
    loaded_q: float = Field(..., description="Loaded Q from the half-power bandwidth")
    output_at_1khz: float = Field(..., description="Relative output at 1 kHz (0-1)")
    brightness_index: float = Field(..., description="Brightness index (0-1)")


class LoadedResonance(BaseModel):
    model_config = ConfigDict(frozen=True)

    loaded_resonance: float
    loaded_q: float


class FrequencyPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: float
    magnitude: float
    magnitude_db: float
    phase_deg: float


class ImpedancePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: float
    magnitude: float = Field(..., description="|Z| (Ohms)")
    phase_deg: float
    real: float
    imag: float


class TransientCharacteristics(BaseModel):
    model_config = ConfigDict(frozen=True)

    decay_time_ms: float = Field(..., description="Time for the ring to decay to 10%")
    ringing_period_ms: float
    ringing_cycles: float
    attack_description: str


# --- Transformer ---

class CoreMaterial(BaseModel):
    """Core material family plus variant. Silicon steel has no variant."""
    base: CoreMaterialBase
    variant: Optional[CoreMaterialVariant] = None

    @model_validator(mode="after")
    def check_variant(self) -> "CoreMaterial":
        if self.base == CoreMaterialBase.SILICON_STEEL:
            if self.variant not in (None, CoreMaterialVariant.SILICON_STEEL):
                raise ValueError("silicon_steel takes no variant")
        elif self.variant is None:
            raise ValueError(f"{self.base.value} requires a variant")
        elif self.variant not in CORE_VARIANTS[self.base]:
            raise ValueError(f"Variant {self.variant.value} does not belong to {self.base.value}")
        return self

    @property
    def key(self) -> CoreMaterialVariant:
        if self.base == CoreMaterialBase.SILICON_STEEL:
            return CoreMaterialVariant.SILICON_STEEL
        return self.variant


class ToroidGeometry(BaseModel):
    inner_diameter: float = Field(..., ge=0, description="Inner diameter (mm)")
    outer_diameter: float = Field(..., ge=0, description="Outer diameter (mm)")
    height: float = Field(..., ge=0, description="Core height (mm)")
    straight_length: float = Field(0.0, ge=0, description="Straight section for oval toroids (mm)")


class TransformerCoreParams(BaseModel):
    shape: CoreShape = CoreShape.TOROID_ROUND
    material: CoreMaterial
    toroid_geometry: Optional[ToroidGeometry] = None
    effective_area: float = Field(..., ge=0, description="Effective area Ae (mm²)")
    effective_length: float = Field(..., ge=0, description="Effective magnetic path length le (mm)")
    air_gap: float = Field(0.0, ge=0, description="Air gap (mm), 0 for a closed core")


class PrimaryWindingConductor(BaseModel):
    type: PrimaryWindingType = PrimaryWindingType.WIRE
    material: ConductorMaterial = ConductorMaterial.COPPER
    wire_awg: Optional[int] = Field(None, description="Wire gauge (AWG), wire primaries")
    plate_thickness: Optional[float] = Field(None, gt=0, description="Plate thickness (mm)")
    plate_width: Optional[float] = Field(None, gt=0, description="Plate width (mm)")


class TransformerWindingParams(BaseModel):
    primary_turns: int = Field(..., description="Primary turns")
    primary_conductor: PrimaryWindingConductor = Field(default_factory=PrimaryWindingConductor)
    secondary_turns: int = Field(..., description="Secondary turns")
    secondary_awg: int = Field(40, description="Secondary wire gauge (AWG)")
    secondary_material: ConductorMaterial = ConductorMaterial.COPPER
    winding_style: TransformerWindingStyle = TransformerWindingStyle.NON_INTERLEAVED
    shielding: bool = Field(False, description="Electrostatic shield between windings")


class TransformerParams(BaseModel):
    enabled: bool = False
    core: TransformerCoreParams
    winding: TransformerWindingParams


class TransformerParasitics(BaseModel):
    model_config = ConfigDict(frozen=True)

    leakage_inductance: float = Field(..., description="Leakage inductance (H)")
    interwinding_capacitance: float = Field(..., description="Interwinding capacitance (F)")
    primary_capacitance: float = Field(..., description="Primary self-capacitance (F)")
    secondary_capacitance: float = Field(..., description="Secondary self-capacitance (F)")
    primary_resistance: float = Field(..., description="Primary DC resistance (Ohms)")
    secondary_resistance: float = Field(..., description="Secondary DC resistance (Ohms)")


class TransformerComputedResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    turns_ratio: float
    voltage_ratio: float
    reflected_load: float = Field(..., description="|Z_load / n²| at 1 kHz (Ohms)")
    primary_inductance: float = Field(..., description="Primary inductance (H)")
    effective_permeability: float
    parasitics: TransformerParasitics
    bandwidth: float = Field(..., description="Upper -3 dB frequency (Hz)")
    saturation_margin: float = Field(..., ge=0, le=1)
    core_loss_estimate: CoreLoss
    saturation_flux: float = Field(..., description="Core Bsat (T)")


# --- Magnet / positioning (computed by an external field model) ---

class MagnetParams(BaseModel):
    type: MagnetType = MagnetType.ALNICO5
    cover_type: CoverType = CoverType.NONE


class PositioningParams(BaseModel):
    string_to_pole_distance: float = Field(..., ge=0, description="String to pole clearance (mm)")
    coil_to_string_distance: Optional[float] = Field(None, ge=0, description="Coil to string distance (mm)")
    pole_spacing: Optional[float] = Field(None, ge=0, description="Pole spacing (mm)")
    string_diameter: float = Field(..., ge=0, description="String diameter (mm)")
    string_material: StringMaterial = StringMaterial.NICKEL


class MagnetComputedResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_at_string: float = Field(..., description="B-field at the string (T)")
    string_pull_warning: StringPullWarning = StringPullWarning.SAFE
    sensitivity_index: float = Field(..., description="Sensitivity (mV/mm)")


# --- Analysis ---

class AnalysisMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: MessageLevel
    title: str
    description: str
    suggestion: Optional[str] = None


class PickupAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages: List[AnalysisMessage] = Field(default_factory=list)
