"""Transformer route."""

from fastapi import APIRouter, HTTPException

from pickup_api.models import TransformerRequest, TransformerResponse
from pickup_api.routes.response import sweep_frequencies
from pickup_engine.transformer import (
    build_transformer_model,
    compute_transformer_response,
    compute_transformer_results,
)

router = APIRouter()


@router.post("/transformer", response_model=TransformerResponse)
async def compute_transformer(request: TransformerRequest):
    """Transformer figures of merit and its normalized response into the load."""
    try:
        freqs = sweep_frequencies(request)
        model = build_transformer_model(request.transformer)
        results = compute_transformer_results(
            request.transformer,
            request.load,
            source_voltage_rms=request.source_voltage_rms,
            operating_frequency=request.operating_frequency,
            model=model,
        )
        response = compute_transformer_response(request.transformer, request.load, freqs, model=model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TransformerResponse(results=results, response=response)
