"""
Rule-based pickup diagnostics.

Turns computed results into advisory messages. No new physics, only
thresholds and phrasing. Each sub-analysis runs in isolation: a failure in
one is logged and contributes nothing, the rest still report.

Messages are returned sorted by severity (danger, warning, info, success);
equal severities keep the order in which they were raised.
"""

import logging
from typing import Callable, List, Optional

from pickup_engine.calibration import DEFAULT_CALIBRATION, Calibration
from pickup_engine.impedance import compute_loaded_resonance_and_q
from pickup_engine.models import (
    AnalysisMessage,
    CoilComputedResults,
    CoverType,
    LoadComputedResults,
    LoadedResonance,
    LoadParams,
    MagnetComputedResults,
    MagnetParams,
    MagnetType,
    MessageLevel,
    PickupAnalysis,
    PositioningParams,
    StringPullWarning,
    TransformerParams,
    WindingStyle,
    WireParams,
)
from pickup_engine.transformer import compute_turns_ratio

logger = logging.getLogger(__name__)

LEVEL_RANK = {
    MessageLevel.DANGER: 0,
    MessageLevel.WARNING: 1,
    MessageLevel.INFO: 2,
    MessageLevel.SUCCESS: 3,
}

# Strings thicker than this are bass strings (mm)
BASS_STRING_DIAMETER = 0.8

AUDIO_BAND_TOP = 20000.0


def sort_messages(messages: List[AnalysisMessage]) -> List[AnalysisMessage]:
    """Stable sort by severity rank."""
    return sorted(messages, key=lambda m: LEVEL_RANK[m.level])


def _message(level: MessageLevel, title: str, description: str, suggestion: Optional[str] = None):
    return AnalysisMessage(level=level, title=title, description=description, suggestion=suggestion)


# --- Sub-analyses ---

def analyze_coil(wire: WireParams, coil: CoilComputedResults) -> List[AnalysisMessage]:
    messages = []
    dcr = coil.dc_resistance / 1000  # Ω → kΩ

    if dcr > 20:
        messages.append(_message(
            MessageLevel.DANGER, "Extremely High DCR",
            f"DC resistance of {dcr:.1f}kΩ is extremely high. Signal will be very weak and noisy.",
            "Use thicker wire (lower AWG) or reduce turns significantly.",
        ))
    elif dcr > 15:
        messages.append(_message(
            MessageLevel.WARNING, "Very High DCR",
            f"DC resistance of {dcr:.1f}kΩ may cause signal loss and noise issues.",
            "Consider using thicker wire or fewer turns.",
        ))
    elif dcr > 12:
        messages.append(_message(
            MessageLevel.INFO, "High DCR",
            f"DC resistance of {dcr:.1f}kΩ is on the high side. Output will be hot but may lose some highs.",
        ))

    if coil.resonant_frequency < 1500:
        messages.append(_message(
            MessageLevel.WARNING, "Very Low Resonance",
            f"Self-resonance at {coil.resonant_frequency / 1000:.1f}kHz is very low. Tone will be muddy.",
            "Reduce turns or use wire with thinner insulation.",
        ))

    if coil.quality_factor < 1.5:
        messages.append(_message(
            MessageLevel.WARNING, "Very Low Q Factor",
            f"Q of {coil.quality_factor:.1f} means heavily damped response. No resonance peak audible.",
            "This may be intentional for very smooth tone, or indicates excessive losses.",
        ))

    if coil.max_turns > 0:
        fill = wire.turns / coil.max_turns
        if wire.turns > coil.max_turns:
            messages.append(_message(
                MessageLevel.DANGER, "Bobbin Overflow",
                f"{wire.turns} turns exceeds estimated capacity of {coil.max_turns}.",
                "Reduce turns, use thinner wire, or increase bobbin size.",
            ))
        elif fill >= 0.95:
            messages.append(_message(
                MessageLevel.WARNING, "Bobbin Nearly Full",
                f"{wire.turns} turns is {fill * 100:.0f}% of estimated capacity.",
                "Coil may overflow bobbin. Use scatter winding or larger bobbin.",
            ))

    if wire.packing_factor > 0.85 and wire.winding_style != WindingStyle.LAYERED:
        messages.append(_message(
            MessageLevel.INFO, "High Packing Factor",
            f"Packing factor of {wire.packing_factor * 100:.0f}% is optimistic for "
            f"{wire.winding_style.value} winding.",
            "Consider using 0.6-0.7 for scatter, 0.7-0.8 for random winding.",
        ))

    return messages


def analyze_magnet(
    magnet_results: MagnetComputedResults,
    magnet: Optional[MagnetParams] = None,
    positioning: Optional[PositioningParams] = None,
) -> List[AnalysisMessage]:
    messages = []

    if magnet_results.string_pull_warning == StringPullWarning.DANGER:
        messages.append(_message(
            MessageLevel.DANGER, "Severe String Pull",
            "Magnetic pull is very strong. Will cause pitch wobble (wolf tones) and intonation problems.",
            "Increase string distance, use weaker magnets, or demagnetize slightly.",
        ))
    elif magnet_results.string_pull_warning == StringPullWarning.CAUTION:
        messages.append(_message(
            MessageLevel.WARNING, "Moderate String Pull",
            "Magnetic pull may affect sustain and intonation on wound strings.",
            "Monitor for wolf tones. Consider increasing string distance.",
        ))

    if positioning is not None:
        distance = positioning.string_to_pole_distance
        if distance < 1.5:
            messages.append(_message(
                MessageLevel.WARNING, "String Very Close",
                f"{distance}mm clearance risks string hitting poles during hard playing.",
                "Increase distance to at least 2mm for safety.",
            ))
        elif distance > 5:
            messages.append(_message(
                MessageLevel.INFO, "String Distance High",
                f"{distance}mm distance will reduce output and sensitivity.",
                "Closer distance gives more output, but watch for string pull.",
            ))

    if magnet is not None:
        if magnet.type == MagnetType.NEODYMIUM:
            messages.append(_message(
                MessageLevel.INFO, "Neodymium Magnets",
                "Very strong field. Great for active pickups but may cause string pull in passive designs.",
                "Keep string distance generous (3-4mm) to avoid wolf tones.",
            ))
        if magnet.cover_type == CoverType.CHROME:
            messages.append(_message(
                MessageLevel.INFO, "Chrome Cover",
                "Chrome plating causes significant treble roll-off due to eddy currents.",
                "Consider nickel silver for less treble loss, or remove cover for brightest tone.",
            ))

    return messages


def analyze_load(
    coil: CoilComputedResults,
    load: LoadParams,
    load_results: LoadComputedResults,
    loaded: LoadedResonance,
) -> List[AnalysisMessage]:
    messages = []
    f0 = loaded.loaded_resonance

    # Below 100 Hz the peak search found nothing meaningful
    if 100 <= f0 < 2000:
        messages.append(_message(
            MessageLevel.WARNING, "Muddy Response",
            f"Loaded resonance at {f0 / 1000:.1f}kHz is very low. Tone will lack clarity.",
            "Use shorter cable, higher value pots, or reduce pickup capacitance.",
        ))
    elif f0 > AUDIO_BAND_TOP:
        messages.append(_message(
            MessageLevel.SUCCESS, "Flat Audio Response",
            f"Resonance at {f0 / 1000:.1f}kHz is above audio range. Response is flat across 20Hz-20kHz.",
            "Ideal for transparent, hi-fi sound. No coloration from resonance peak.",
        ))
    elif f0 > 10000:
        messages.append(_message(
            MessageLevel.INFO, "Bright Response",
            f"Loaded resonance at {f0 / 1000:.1f}kHz emphasizes upper treble.",
            "May want longer cable for warmer tone, or enjoy the sparkle.",
        ))

    cable_pf = load_results.total_cable_capacitance * 1e12
    if cable_pf > 1500:
        messages.append(_message(
            MessageLevel.WARNING, "High Cable Capacitance",
            f"{cable_pf:.0f}pF total cable capacitance is pulling resonance down significantly.",
            "Use shorter cable or low-capacitance cable (<50pF/ft).",
        ))

    if loaded.loaded_q < 1:
        messages.append(_message(
            MessageLevel.INFO, "Heavily Damped",
            f"Loaded Q of {loaded.loaded_q:.1f} means very flat response with no resonance peak.",
            "Use higher value pots (500k/1M) for more presence.",
        ))

    if load.volume_pot < 250_000 and coil.inductance > 3:
        messages.append(_message(
            MessageLevel.INFO, "Low Value Pots",
            "250k pots with high-inductance pickup will sound dark.",
            "Consider 500k pots for brighter response.",
        ))

    return messages


def recommend_dcr(coil: CoilComputedResults) -> List[AnalysisMessage]:
    dcr = coil.dc_resistance / 1000
    if dcr > 6:
        return [_message(
            MessageLevel.INFO, "DCR Tradeoff",
            f"{dcr:.1f}kΩ DCR increases output but also noise and signal loss.",
            "Lower DCR = cleaner signal. Higher DCR = more output but muddier.",
        )]
    return []


def recommend_resonance(loaded: LoadedResonance, is_bass: bool) -> List[AnalysisMessage]:
    """Tonal advice on the loaded peak. Bass pickups live lower (40 Hz-5 kHz vs 80 Hz-12 kHz)."""
    messages = []
    f0 = loaded.loaded_resonance
    q = loaded.loaded_q

    if f0 < 100:
        return messages

    low_threshold = 1500 if is_bass else 3000
    high_threshold = 4000 if is_bass else 6000

    if f0 < low_threshold:
        messages.append(_message(
            MessageLevel.WARNING, "Low Resonance",
            f"{f0 / 1000:.1f}kHz resonance may sound dark/muddy.",
            "Reduce cable length or use higher value pots for brighter tone.",
        ))
    elif high_threshold < f0 <= AUDIO_BAND_TOP:
        messages.append(_message(
            MessageLevel.INFO, "High Resonance",
            f"{f0 / 1000:.1f}kHz resonance - bright, sparkly tone.",
            "Add cable capacitance or use 250k pots if too bright.",
        ))

    if f0 <= AUDIO_BAND_TOP:
        if q < 2:
            messages.append(_message(
                MessageLevel.INFO, "Low Q Factor",
                f"Q of {q:.1f} - flat response, no resonance peak audible.",
                "Use higher value pots or reduce cable length for more presence.",
            ))
        elif q > 6:
            messages.append(_message(
                MessageLevel.INFO, "High Q Factor",
                f"Q of {q:.1f} - pronounced resonance peak, characterful tone.",
            ))

    return messages


def recommend_sensitivity(
    magnet_results: MagnetComputedResults,
    is_bass: bool,
    transformer: Optional[TransformerParams] = None,
) -> List[AnalysisMessage]:
    """Sensitivity (mV/mm) after any step-up. Bass strings swing ~3x further, so lower is normal."""
    sensitivity = magnet_results.sensitivity_index
    if transformer is not None and transformer.enabled:
        sensitivity *= compute_turns_ratio(
            transformer.winding.primary_turns, transformer.winding.secondary_turns,
        )

    low_threshold = 0.04 if is_bass else 0.15
    high_threshold = 0.5 if is_bass else 1.2

    if sensitivity < low_threshold:
        return [_message(
            MessageLevel.WARNING, "Low Sensitivity",
            f"{sensitivity:.2f} mV/mm - weak output.",
            "Move strings closer to poles or use stronger magnets.",
        )]
    if sensitivity > high_threshold:
        return [_message(
            MessageLevel.INFO, "Very High Sensitivity",
            f"{sensitivity:.2f} mV/mm - may cause clipping.",
            "Watch for input overload on clean amp settings.",
        )]
    return []


# --- Entry point ---

def _isolated(name: str, fn: Callable, *args) -> List[AnalysisMessage]:
    try:
        return fn(*args)
    except Exception:
        logger.warning("Pickup analysis step '%s' failed, skipping it", name, exc_info=True)
        return []


def _resolve_loaded(
    coil: CoilComputedResults,
    load: LoadParams,
    load_results: LoadComputedResults,
    transformer: Optional[TransformerParams],
    calibration: Calibration,
) -> LoadedResonance:
    """Loaded peak, re-derived through the transformer when one is enabled."""
    if transformer is not None and transformer.enabled:
        return compute_loaded_resonance_and_q(
            coil.dc_resistance, coil.inductance, coil.capacitance, load,
            transformer=transformer, calibration=calibration,
        )
    return LoadedResonance(
        loaded_resonance=load_results.loaded_resonance,
        loaded_q=load_results.loaded_q,
    )


def analyze_pickup(
    wire: WireParams,
    coil: CoilComputedResults,
    magnet: Optional[MagnetParams] = None,
    positioning: Optional[PositioningParams] = None,
    magnet_results: Optional[MagnetComputedResults] = None,
    load: Optional[LoadParams] = None,
    load_results: Optional[LoadComputedResults] = None,
    transformer: Optional[TransformerParams] = None,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> PickupAnalysis:
    """
    Diagnose a pickup design.

    Args:
        wire: Winding parameters (turns, packing, style).
        coil: Computed coil results.
        magnet: Magnet material and cover, if known.
        positioning: String geometry, if known.
        magnet_results: Field-model output (string pull, sensitivity).
        load: Load parameters.
        load_results: Loaded results computed without a transformer.
        transformer: Transformer, if any. When enabled, loaded resonance
            and Q are recomputed through it.

    Returns:
        PickupAnalysis with messages ordered by severity.
    """
    messages: List[AnalysisMessage] = []
    is_bass = positioning is not None and positioning.string_diameter > BASS_STRING_DIAMETER

    messages.extend(_isolated("coil", analyze_coil, wire, coil))

    if magnet_results is not None:
        messages.extend(_isolated("magnet", analyze_magnet, magnet_results, magnet, positioning))

    loaded = None
    if load is not None and load_results is not None:
        try:
            loaded = _resolve_loaded(coil, load, load_results, transformer, calibration)
        except Exception:
            logger.warning("Loaded resonance unavailable, skipping load analysis", exc_info=True)

    if loaded is not None:
        messages.extend(_isolated("load", analyze_load, coil, load, load_results, loaded))

    messages.extend(_isolated("dcr", recommend_dcr, coil))

    if loaded is not None:
        messages.extend(_isolated("resonance", recommend_resonance, loaded, is_bass))

    if magnet_results is not None:
        messages.extend(_isolated(
            "sensitivity", recommend_sensitivity, magnet_results, is_bass, transformer,
        ))

    return PickupAnalysis(messages=sort_messages(messages))
