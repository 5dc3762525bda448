"""
schema.py: The four-section crisis briefing contract.

The same field sets are expressed twice:

    • pydantic models   - validate the service reply (all fields str, all required)
    • RESPONSE_SCHEMA   - the JSON schema sent with the request, in the
                          generation API's OpenAPI subset (OBJECT / STRING)

RESPONSE_SCHEMA is derived from the models so the two cannot drift.

    Section                      Fields
    ──────────────────────────   ─────────────────────────────────────────
    anomaly_detection_status     level, cause, risk_score, action_required,
                                 geo_fencing_violation
    digital_id_retrieval         status, tourist_name, emergency_contact,
                                 critical_medical_data, document_hash
    contextual_guidance          target_team, mission_priority,
                                 critical_protocol, resource_note
    multilingual_communication   source_language, target_language,
                                 message_for_rescue_team, message_for_contact
"""

from __future__ import annotations

import json
from typing import Any, Dict, Type

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError


SYSTEM_INSTRUCTION = (
    "You are 'TourSafe Cognitive Core,' an AI Agent for safety analysis in India. "
    "Output MUST be a single, valid JSON object."
)


class MalformedBriefingError(ValueError):
    """The reply was not JSON or did not match the briefing schema."""


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class AnomalyDetectionStatus(_Section):
    level: str
    cause: str
    risk_score: str
    action_required: str
    geo_fencing_violation: str


class DigitalIdRetrieval(_Section):
    status: str
    tourist_name: str
    emergency_contact: str
    critical_medical_data: str
    document_hash: str


class ContextualGuidance(_Section):
    target_team: str
    mission_priority: str
    critical_protocol: str
    resource_note: str


class MultilingualCommunication(_Section):
    source_language: str
    target_language: str
    message_for_rescue_team: str
    message_for_contact: str


class CrisisBriefing(_Section):
    """A complete, schema-conforming briefing."""
    anomaly_detection_status: AnomalyDetectionStatus
    digital_id_retrieval: DigitalIdRetrieval
    contextual_guidance: ContextualGuidance
    multilingual_communication: MultilingualCommunication


def _object_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    fields = list(model.model_fields)
    return {
        "type": "OBJECT",
        "properties": {name: {"type": "STRING"} for name in fields},
        "required": fields,
    }


RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        name: _object_schema(info.annotation)
        for name, info in CrisisBriefing.model_fields.items()
    },
    "required": list(CrisisBriefing.model_fields),
}


def parse_briefing(text: str) -> CrisisBriefing:
    """
    Parse and validate a raw service reply.

    Raises
    ------
    MalformedBriefingError
        Not JSON, not an object, or any section / field missing or non-string.
    """
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedBriefingError(f"Reply is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedBriefingError(
            f"Reply must be a JSON object, got {type(data).__name__}"
        )

    try:
        return CrisisBriefing.model_validate(data)
    except PydanticValidationError as e:
        raise MalformedBriefingError(
            f"Reply does not match briefing schema ({e.error_count()} errors)"
        ) from e
