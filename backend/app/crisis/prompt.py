"""
prompt.py: Incident prompt construction for crisis briefings.

The prompt embeds, in a fixed order:

    1. tourist uid, age, tech comfort
    2. position rounded to 4 decimal places
    3. alert type and details
    4. medical notes
    5. emergency contact name and phone
    6. target rescue language
    7. rescue authority
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from backend.app.alerts.models import Alert
from backend.app.crisis.schema import RESPONSE_SCHEMA, SYSTEM_INSTRUCTION
from backend.app.tracking.models import Tourist


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the generation service needs for one briefing."""
    prompt: str
    system_instruction: str = SYSTEM_INSTRUCTION
    response_schema: Dict[str, Any] = field(default_factory=lambda: RESPONSE_SCHEMA)


def build_incident_prompt(
    tourist: Tourist,
    alert: Alert,
    *,
    rescue_language: str,
    rescue_authority: str,
) -> str:
    profile = tourist.profile
    contact = profile.emergency_contact
    lat, lng = tourist.position.rounded(4)
    return (
        "Simulate a Level 3 Crisis Alert based on the following input data: "
        f"1. User ID: {tourist.uid} ({profile.age}-year-old tourist, "
        f"{profile.tech_comfort.value} tech comfort). "
        f"2. Location: {lat:.4f}, {lng:.4f} (Himalayan trekking zone, India). "
        f"3. Anomaly Data: Alert Type is '{alert.alert_type.value}'. Details: {alert.details}. "
        f"4. Tourist Medical Data: {profile.medical_notes}. "
        f"5. Emergency Contact: {contact.name} ({contact.phone}). "
        f"6. Required Target Language for Rescue Team: {rescue_language}. "
        f"7. Primary Rescue Authority: {rescue_authority}. "
        "Generate the full crisis response analysis."
    )


def build_generation_request(
    tourist: Tourist,
    alert: Alert,
    *,
    rescue_language: str,
    rescue_authority: str,
) -> GenerationRequest:
    return GenerationRequest(
        prompt=build_incident_prompt(
            tourist, alert,
            rescue_language=rescue_language,
            rescue_authority=rescue_authority,
        ),
    )
