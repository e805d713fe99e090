"""Request and response models for the PickupForge API."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from pickup_engine.models import (
    AnalysisMessage,
    CoilComputedResults,
    CoilGeometry,
    CombinedCoilResults,
    FrequencyPoint,
    ImpedancePoint,
    LoadComputedResults,
    LoadParams,
    MagnetComputedResults,
    MagnetParams,
    PhaseConfig,
    PositioningParams,
    TransformerComputedResults,
    TransformerParams,
    TransientCharacteristics,
    WireParams,
    WiringConfig,
)


# --- Sweep ---

class SweepParams(BaseModel):
    freq_start: float = Field(20.0, gt=0, description="Sweep start (Hz)")
    freq_end: float = Field(20000.0, gt=0, description="Sweep end (Hz)")
    num_points: Optional[int] = Field(None, gt=10, le=5000, description="Points; server default when omitted")


# --- Coil ---

class CoilRequest(BaseModel):
    geometry: CoilGeometry
    wire: WireParams
    second_geometry: Optional[CoilGeometry] = Field(None, description="Second coil for humbucker wiring")
    second_wire: Optional[WireParams] = Field(None, description="Second coil wire, defaults to the first")
    wiring: WiringConfig = WiringConfig.SINGLE
    phase: PhaseConfig = PhaseConfig.IN_PHASE
    coupling: Union[float, str] = Field(
        "humbucker_side", description="Coupling coefficient k, or a preset (humbucker_side, stacked, spaced)",
    )


class CoilResponse(BaseModel):
    coil: CoilComputedResults
    second_coil: Optional[CoilComputedResults] = None
    combined: CombinedCoilResults


# --- Loaded response ---

class ResponseRequest(SweepParams):
    coil: CoilComputedResults
    load: LoadParams = Field(default_factory=LoadParams)
    transformer: Optional[TransformerParams] = None
    normalize: bool = Field(True, description="Report magnitudes relative to 1 kHz")


class ResponseResponse(BaseModel):
    frequency_response: List[FrequencyPoint]
    impedance: List[ImpedancePoint]
    load_results: LoadComputedResults
    transient: TransientCharacteristics


# --- Transformer ---

class TransformerRequest(SweepParams):
    transformer: TransformerParams
    load: LoadParams = Field(default_factory=LoadParams)
    source_voltage_rms: float = Field(0.1, gt=0, description="Drive level for the saturation check (V rms)")
    operating_frequency: float = Field(1000.0, gt=0, description="Frequency for saturation and core loss (Hz)")


class TransformerResponse(BaseModel):
    results: TransformerComputedResults
    response: List[FrequencyPoint]


# --- Analysis ---

class AnalyzeRequest(BaseModel):
    geometry: CoilGeometry
    wire: WireParams
    magnet: Optional[MagnetParams] = None
    positioning: Optional[PositioningParams] = None
    magnet_results: Optional[MagnetComputedResults] = Field(
        None, description="Output of an external field model",
    )
    load: Optional[LoadParams] = None
    transformer: Optional[TransformerParams] = None


class AnalyzeResponse(BaseModel):
    coil: CoilComputedResults
    load_results: Optional[LoadComputedResults] = None
    messages: List[AnalysisMessage]


# --- Cores ---

class CoreInfo(BaseModel):
    id: str
    name: str
    shape: str
    material: dict
    effective_area: float = Field(..., description="Ae (mm²)")
    effective_length: float = Field(..., description="le (mm)")
    saturation_flux: float = Field(..., description="Bsat (T)")
    permeability_range: List[float]
    typical_permeability: float
    loss_grade: str
    description: str


class CoreListResponse(BaseModel):
    cores: List[CoreInfo]
    total: int
