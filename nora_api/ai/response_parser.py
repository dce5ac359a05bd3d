import re
from typing import Any, Dict


STEPS_PATTERN = re.compile(r"\d+\.|step \d+|first,|second,|then,", re.IGNORECASE)
WARNING_PATTERN = re.compile(r"warning|careful|scam|suspicious|don't|avoid|danger", re.IGNORECASE)
DANGER_PATTERN = re.compile(r"danger|scam|fraud|steal", re.IGNORECASE)

SAFE_PATTERN = re.compile(r"safe|legitimate|okay|fine", re.IGNORECASE)
DANGEROUS_PATTERN = re.compile(r"scam|fraud|dangerous|don't|never|warning", re.IGNORECASE)


def analyze_response(text: str) -> Dict[str, Any]:
    """
    Flag chat replies the client should render specially:
    step-by-step instructions and warnings.
    """
    needs_steps = bool(STEPS_PATTERN.search(text))
    contains_warning = bool(WARNING_PATTERN.search(text))

    severity = "info"
    if contains_warning:
        severity = "danger" if DANGER_PATTERN.search(text) else "warning"

    return {
        "needsSteps": needs_steps,
        "containsWarning": contains_warning,
        "severity": severity,
    }


def determine_severity(analysis: str) -> str:
    """
    Severity of a text safety analysis.
    """
    lowered = analysis.lower()

    if any(k in lowered for k in ("dangerous", "scam", "fraud")):
        return "danger"
    if any(k in lowered for k in ("suspicious", "warning", "careful")):
        return "warning"
    return "info"


def assess_scam(analysis: str) -> Dict[str, Any]:
    """
    Verdict for a scam image analysis. A reply that reads as safe wins
    over danger keywords.
    """
    is_safe = bool(SAFE_PATTERN.search(analysis))
    is_dangerous = bool(DANGEROUS_PATTERN.search(analysis))

    if is_safe:
        severity = "info"
    elif is_dangerous:
        severity = "danger"
    else:
        severity = "warning"

    return {
        "severity": severity,
        "isSafe": is_safe,
        "isDangerous": is_dangerous,
    }
