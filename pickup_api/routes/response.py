"""Response route: loaded frequency response, coil impedance and loaded figures."""

import numpy as np
from fastapi import APIRouter, HTTPException

from pickup_api import config
from pickup_api.models import ResponseRequest, ResponseResponse, SweepParams
from pickup_engine.impedance import (
    REFERENCE_FREQUENCY,
    compute_full_system_response,
    compute_impedance_curve,
    compute_load_results,
    compute_transient_characteristics,
    generate_log_frequencies,
)

router = APIRouter()


def sweep_frequencies(params: SweepParams) -> np.ndarray:
    if params.freq_end <= params.freq_start:
        raise ValueError(
            f"freq_end ({params.freq_end} Hz) must be above freq_start ({params.freq_start} Hz)"
        )
    num_points = params.num_points or config.SWEEP_POINTS
    return generate_log_frequencies(params.freq_start, params.freq_end, num_points)


@router.post("/response", response_model=ResponseResponse)
async def compute_response(request: ResponseRequest):
    """Frequency response of a coil into its load, through a transformer when enabled."""
    coil = request.coil
    try:
        freqs = sweep_frequencies(request)
        response = compute_full_system_response(
            coil.dc_resistance, coil.inductance, coil.capacitance, request.load, freqs,
            transformer=request.transformer,
            reference_frequency=REFERENCE_FREQUENCY if request.normalize else None,
        )
        impedance = compute_impedance_curve(coil.dc_resistance, coil.inductance, coil.capacitance, freqs)
        load_results = compute_load_results(coil, request.load, transformer=request.transformer)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    transient = compute_transient_characteristics(load_results.loaded_resonance, load_results.loaded_q)
    return ResponseResponse(
        frequency_response=response,
        impedance=impedance,
        load_results=load_results,
        transient=transient,
    )
