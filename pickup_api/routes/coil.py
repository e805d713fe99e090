"""Coil route: geometry + wire → electrical parameters, optional two-coil wiring."""

from fastapi import APIRouter, HTTPException

from pickup_api.models import CoilRequest, CoilResponse
from pickup_engine.coil import compute_coil_results
from pickup_engine.wiring import compute_combined_coil

router = APIRouter()


@router.post("/coil", response_model=CoilResponse)
async def compute_coil(request: CoilRequest):
    """Compute R, L, C, f0 and Q, and combine with a second coil when one is given."""
    try:
        coil = compute_coil_results(request.geometry, request.wire)

        second = None
        if request.second_geometry is not None:
            second = compute_coil_results(request.second_geometry, request.second_wire or request.wire)

        combined = compute_combined_coil(coil, second, request.wiring, request.phase, request.coupling)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CoilResponse(coil=coil, second_coil=second, combined=combined)
