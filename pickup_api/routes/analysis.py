"""Analysis route: compute the coil (and its load) and run the diagnostics."""

from fastapi import APIRouter, HTTPException

from pickup_api.models import AnalyzeRequest, AnalyzeResponse
from pickup_engine.analyzer import analyze_pickup
from pickup_engine.coil import compute_coil_results
from pickup_engine.impedance import compute_load_results

router = APIRouter()


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """Design diagnostics, most severe first."""
    try:
        coil = compute_coil_results(request.geometry, request.wire)
        load_results = None
        if request.load is not None:
            load_results = compute_load_results(coil, request.load)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    analysis = analyze_pickup(
        request.wire,
        coil,
        magnet=request.magnet,
        positioning=request.positioning,
        magnet_results=request.magnet_results,
        load=request.load,
        load_results=load_results,
        transformer=request.transformer,
    )
    return AnalyzeResponse(coil=coil, load_results=load_results, messages=analysis.messages)
