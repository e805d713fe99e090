"""
PickupForge Compute Engine

Lumped-circuit model of a magnetic pickup: coil electrical parameters,
loaded and transformer-coupled frequency response, and rule-based
design diagnostics.

All math is deterministic and closed-form or low-order numeric; no field
simulation.
"""

from pickup_engine.phasor import Complex, OPEN_CIRCUIT, parallel, magnitude, phase_deg
from pickup_engine.calibration import Calibration, DEFAULT_CALIBRATION, awg_from_diameter
from pickup_engine.coil import InvalidGeometryError, compute_coil_results
from pickup_engine.impedance import (
    compute_full_system_response,
    compute_impedance_curve,
    compute_load_results,
    compute_loaded_resonance_and_q,
    compute_transient_characteristics,
    generate_log_frequencies,
)
from pickup_engine.transformer import compute_transformer_results, compute_transformer_response
from pickup_engine.wiring import compute_combined_coil
from pickup_engine.cores import list_cores, get_core
from pickup_engine.analyzer import analyze_pickup, sort_messages

__version__ = "0.1.0"
