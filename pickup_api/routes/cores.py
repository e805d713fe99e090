"""Core catalog routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from pickup_api.models import CoreInfo, CoreListResponse
from pickup_engine.cores import get_core, list_cores

router = APIRouter()


@router.get("/cores", response_model=CoreListResponse)
async def list_transformer_cores(
    q: Optional[str] = Query(None, description="Search query"),
    material: Optional[str] = Query(None, description="Material family, e.g. nanocrystalline"),
    shape: Optional[str] = Query(None, description="Core shape, e.g. toroid_round"),
):
    """List transformer cores, optionally filtered."""
    cores = list_cores(material_base=material, shape=shape, query=q)
    return CoreListResponse(cores=[CoreInfo(**c) for c in cores], total=len(cores))


@router.get("/cores/{core_id}", response_model=CoreInfo)
async def get_transformer_core(core_id: str):
    core = get_core(core_id)
    if not core:
        raise HTTPException(status_code=404, detail="Core not found")
    return CoreInfo(**core)
