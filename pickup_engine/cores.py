"""
Transformer core catalog.

Curated cores suitable for pickup transformers. Dimensions are effective
magnetic values from manufacturer datasheets: Ae in mm², le in mm,
Bsat in Tesla.
"""

from typing import Dict, List, Optional

from pickup_engine.models import CoreMaterial, CoreShape, TransformerCoreParams


SEED_CORES = (
    # --- Nanocrystalline toroids ---
    {"id": "nano_toroid_small", "name": "Nanocrystalline Toroid (Small)",
     "shape": "toroid_round", "material": {"base": "nanocrystalline", "variant": "nc_iron"},
     "effective_area": 25.0, "effective_length": 40.0, "saturation_flux": 1.2,
     "permeability_range": (15000, 80000), "typical_permeability": 30000, "loss_grade": "low",
     "description": "Compact high-permeability core for low-power applications"},

    {"id": "nano_toroid_medium", "name": "Nanocrystalline Toroid (Medium)",
     "shape": "toroid_round", "material": {"base": "nanocrystalline", "variant": "nc_iron"},
     "effective_area": 52.0, "effective_length": 62.0, "saturation_flux": 1.2,
     "permeability_range": (20000, 100000), "typical_permeability": 50000, "loss_grade": "low",
     "description": "Standard size for pickup transformers, excellent audio performance"},

    {"id": "nano_toroid_large", "name": "Nanocrystalline Toroid (Large)",
     "shape": "toroid_round", "material": {"base": "nanocrystalline", "variant": "nc_iron"},
     "effective_area": 100.0, "effective_length": 85.0, "saturation_flux": 1.2,
     "permeability_range": (30000, 150000), "typical_permeability": 80000, "loss_grade": "low",
     "description": "Large core for higher power or lower frequency extension"},

    # --- Amorphous C-cores ---
    {"id": "amorphous_c_small", "name": "Amorphous C-Core (Small)",
     "shape": "c_core", "material": {"base": "amorphous", "variant": "am_iron"},
     "effective_area": 30.0, "effective_length": 50.0, "saturation_flux": 1.56,
     "permeability_range": (1000, 10000), "typical_permeability": 5000, "loss_grade": "low",
     "description": "Good balance of saturation and permeability"},

    {"id": "amorphous_c_medium", "name": "Amorphous C-Core (Medium)",
     "shape": "c_core", "material": {"base": "amorphous", "variant": "am_iron"},
     "effective_area": 65.0, "effective_length": 75.0, "saturation_flux": 1.56,
     "permeability_range": (1500, 15000), "typical_permeability": 8000, "loss_grade": "low",
     "description": "Versatile core for various transformer designs"},

    # --- Ferrite ---
    {"id": "ferrite_toroid_small", "name": "NiZn Ferrite Toroid (Small)",
     "shape": "toroid_round", "material": {"base": "ferrite", "variant": "ferrite_nizn"},
     "effective_area": 20.0, "effective_length": 35.0, "saturation_flux": 0.35,
     "permeability_range": (125, 850), "typical_permeability": 400, "loss_grade": "medium",
     "description": "Compact ferrite for high-frequency applications"},

    {"id": "ferrite_toroid_medium", "name": "MnZn Ferrite Toroid (Medium)",
     "shape": "toroid_round", "material": {"base": "ferrite", "variant": "ferrite_mnzn"},
     "effective_area": 45.0, "effective_length": 55.0, "saturation_flux": 0.45,
     "permeability_range": (2000, 5000), "typical_permeability": 3000, "loss_grade": "medium",
     "description": "Standard ferrite for audio frequency range"},

    {"id": "ferrite_ei_small", "name": "Ferrite EI Core (Small)",
     "shape": "ei_core", "material": {"base": "ferrite", "variant": "ferrite_mnzn"},
     "effective_area": 35.0, "effective_length": 45.0, "saturation_flux": 0.4,
     "permeability_range": (1500, 4000), "typical_permeability": 2500, "loss_grade": "medium",
     "description": "EI shape for easy winding"},

    # --- Laminated steel (reference) ---
    {"id": "steel_ei_small", "name": "Silicon Steel EI (Small)",
     "shape": "ei_core", "material": {"base": "silicon_steel"},
     "effective_area": 40.0, "effective_length": 60.0, "saturation_flux": 1.5,
     "permeability_range": (2000, 8000), "typical_permeability": 4000, "loss_grade": "high",
     "description": "Traditional laminated steel core"},
)


def _copy(core: Dict) -> Dict:
    c = dict(core)
    c["material"] = dict(core["material"])
    return c


def list_cores(
    material_base: Optional[str] = None,
    shape: Optional[str] = None,
    query: Optional[str] = None,
) -> List[Dict]:
    """Catalog entries filtered by material family, shape, or free text."""
    results = list(SEED_CORES)

    if material_base:
        results = [c for c in results if c["material"]["base"] == material_base]

    if shape:
        results = [c for c in results if c["shape"] == shape]

    if query:
        q = query.lower()
        results = [
            c for c in results
            if q in c["id"] or q in c["name"].lower() or q in c["description"].lower()
        ]

    return [_copy(c) for c in results]


def get_core(core_id: str) -> Optional[Dict]:
    for c in SEED_CORES:
        if c["id"] == core_id:
            return _copy(c)
    return None


def core_params(core_id: str, air_gap: float = 0.0) -> TransformerCoreParams:
    """Core parameters for a catalog entry, ready for the transformer model."""
    core = get_core(core_id)
    if core is None:
        raise ValueError(f"Unknown core '{core_id}'")
    return TransformerCoreParams(
        shape=CoreShape(core["shape"]),
        material=CoreMaterial(**core["material"]),
        effective_area=core["effective_area"],
        effective_length=core["effective_length"],
        air_gap=air_gap,
    )
