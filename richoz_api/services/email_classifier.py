from typing import Any, Dict, Optional

from ..models.emails import TYPE_INFO, TYPE_INTERVENTION
from ..models.interventions import PRIORITY_NORMAL, PRIORITY_URGENT


def classify_email(email) -> str:
    """Un email n'est une demande d'intervention que si on nous le dit explicitement."""
    extracted = email.extracted_data or {}
    declared = email.email_type or extracted.get("email_type") or TYPE_INFO
    return TYPE_INTERVENTION if declared == TYPE_INTERVENTION else TYPE_INFO


def detect_priority(subject: Optional[str], extracted: Optional[Dict[str, Any]]) -> int:
    extracted = extracted or {}
    if "urgent" in (subject or "").lower() or extracted.get("priority") == "urgent":
        return PRIORITY_URGENT
    return PRIORITY_NORMAL
