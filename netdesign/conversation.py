"""Conversation stage tracking.

Pulls ``keyword: value`` lines out of the assistant's free-text replies and
moves the conversation from gathering to recommending once enough fields are
known. Extraction is best effort: a reply with no matching lines simply adds
nothing.
"""

import copy
import logging
import re
from typing import Dict, Optional

from .topology import MAX_COMPANY_SIZE, MAX_OFFICE_USERS

logger = logging.getLogger(__name__)

STAGE_INITIAL = "initial"
STAGE_GATHERING = "gathering"
STAGE_RECOMMENDING = "recommending"
STAGES = (STAGE_INITIAL, STAGE_GATHERING, STAGE_RECOMMENDING)

RECOMMENDING_THRESHOLD = 3

DEFAULT_QUESTIONS = [
    "What is your company size?",
    "What industry are you in?",
    "How many physical locations do you have?",
    "What is your required network uptime?",
    "What are your critical business applications?",
    "Estimated number of network users?",
    "What are your primary network security concerns?",
]

# keyword as it appears in the reply -> collectedInfo attribute
ATTRIBUTE_MAPPING = {
    "company size": "companySize",
    "industry": "industryType",
    "locations": "locations",
    "uptime": "requiredUptime",
    "users": "estimatedUsers",
    "applications": "criticalApplications",
    "security": "securityRequirements",
}

_FIELD_PATTERNS = {
    keyword: re.compile(rf"{re.escape(keyword)}:\s*([^\n]+)", re.IGNORECASE)
    for keyword in ATTRIBUTE_MAPPING
}


def default_context() -> dict:
    return {
        "questions": list(DEFAULT_QUESTIONS),
        "collectedInfo": {},
        "stage": STAGE_INITIAL,
    }


def merge_context(provided: Optional[dict]) -> dict:
    """Overlay a client-supplied (possibly partial) context on the default one."""
    context = default_context()
    if provided:
        for key in ("questions", "collectedInfo", "stage"):
            if provided.get(key) is not None:
                context[key] = copy.deepcopy(provided[key])
    if context["stage"] not in STAGES:
        context["stage"] = STAGE_INITIAL
    return context


def extract_fields(reply: str) -> Dict[str, str]:
    extracted = {}
    for keyword, pattern in _FIELD_PATTERNS.items():
        match = pattern.search(reply or "")
        if match:
            extracted[ATTRIBUTE_MAPPING[keyword]] = match.group(1).strip()
    return extracted


def stage_for(collected_info: dict) -> str:
    if len(collected_info) > RECOMMENDING_THRESHOLD:
        return STAGE_RECOMMENDING
    return STAGE_GATHERING


def track_reply(reply: str, context: Optional[dict]) -> dict:
    """Return the context updated with whatever the reply yields.

    The input context is left untouched.
    """
    current = merge_context(context)
    extracted = extract_fields(reply)

    collected = dict(current["collectedInfo"])
    collected.update(extracted)

    # Substring match on the attribute name; over-eager by nature
    attributes = [attr.lower() for attr in extracted]
    questions = [
        q for q in current["questions"]
        if not any(attr in q.lower() for attr in attributes)
    ]

    stage = stage_for(collected)
    if stage != current["stage"]:
        logger.info(f"Conversation stage {current['stage']} -> {stage} ({len(collected)} fields)")
    if extracted:
        logger.info(f"Extracted fields from reply: {sorted(extracted)}")

    return {"questions": questions, "collectedInfo": collected, "stage": stage}


def next_question(context: Optional[dict]) -> Optional[str]:
    questions = (context or {}).get("questions") or []
    return questions[0] if questions else None


_FIRST_INT = re.compile(r"\d[\d,]*")


def _first_int(text) -> int:
    match = _FIRST_INT.search(str(text or ""))
    if not match:
        return 0
    return int(match.group(0).replace(",", ""))


def design_inputs_from_collected_info(collected_info: Optional[dict]) -> dict:
    """Best-effort mapping from chat-extracted fields to generator inputs, capped
    at the same limits as the design form."""
    info = collected_info or {}
    return {
        "formData": {
            "companySize": min(_first_int(info.get("companySize")), MAX_COMPANY_SIZE),
            "officeUsers": min(_first_int(info.get("estimatedUsers")), MAX_OFFICE_USERS),
        },
        "departments": [],
    }
