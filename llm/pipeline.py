from __future__ import annotations

import json
import logging
from typing import Dict, Iterator, List

from pydantic import ValidationError

from policy.tiers import critical_field_table
from schemas.ai import (
    AnalysisStatus,
    GapAnalysis,
    GapAnalysisResult,
    ParsedCV,
    Transliteration,
)
from schemas.resume import ApplicantRecord

from .client import CollaboratorError, LLMClient, MissingCredentialError
from .prompts import (
    CHAT_SYSTEM_PROMPT,
    CV_EXTRACTION_PROMPT,
    GAP_ANALYSIS_PROMPT,
    TRANSLITERATION_PROMPT,
)

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "AI analysis unavailable. Please try again later."
CREDENTIAL_MESSAGE = "An API key is required for AI analysis."


def record_json(record: ApplicantRecord) -> str:
    return json.dumps(record.to_wire(), ensure_ascii=False, indent=2)


def analyze_gaps(client: LLMClient, record: ApplicantRecord) -> GapAnalysisResult:
    """
    Ask the model for an advisory gap analysis. Never raises: a failing call or a
    response that does not match the GapAnalysis schema yields "unavailable".
    """
    table = critical_field_table()
    prompt = GAP_ANALYSIS_PROMPT.format(
        record_json=record_json(record),
        tier=record.tier.value,
        critical_fields="\n".join(f"- {tier}: {', '.join(fields)}" for tier, fields in table.items()),
    )
    try:
        data = client.chat_json(prompt)
        analysis = GapAnalysis.model_validate(data)
    except MissingCredentialError as exc:
        return GapAnalysisResult(status=AnalysisStatus.CREDENTIAL_REQUIRED, message=str(exc))
    except ValidationError as exc:
        logger.warning("Gap analysis response did not match schema: %s", exc)
        return GapAnalysisResult(status=AnalysisStatus.UNAVAILABLE, message=UNAVAILABLE_MESSAGE)
    except CollaboratorError as exc:
        logger.warning("Gap analysis failed: %s", exc)
        return GapAnalysisResult(status=AnalysisStatus.UNAVAILABLE, message=UNAVAILABLE_MESSAGE)
    return GapAnalysisResult(status=AnalysisStatus.AVAILABLE, analysis=analysis)


def extract_cv(client: LLMClient, raw_text: str) -> ParsedCV:
    if not raw_text.strip():
        raise ValueError("CV text is empty.")
    data = client.chat_json(CV_EXTRACTION_PROMPT.format(cv_text=raw_text))
    try:
        return ParsedCV.model_validate(data)
    except ValidationError as exc:
        raise CollaboratorError(f"CV extraction returned an unexpected shape: {exc}") from exc


def transliterate_name(client: LLMClient, name: str, source_language: str = "English") -> Transliteration:
    if not (name or "").strip():
        raise ValueError("Name is required.")
    prompt = TRANSLITERATION_PROMPT.format(name=name.strip(), source_language=source_language)
    data = client.chat_json(prompt)
    try:
        return Transliteration.model_validate(data)
    except ValidationError as exc:
        raise CollaboratorError(f"Transliteration returned an unexpected shape: {exc}") from exc


def chat_messages(history: List[Dict[str, str]], record: ApplicantRecord) -> List[Dict[str, str]]:
    system = {"role": "system", "content": CHAT_SYSTEM_PROMPT.format(record_json=record_json(record))}
    return [system] + [m for m in history if m.get("role") in {"user", "assistant"}]


def stream_chat(client: LLMClient, history: List[Dict[str, str]], record: ApplicantRecord) -> Iterator[str]:
    """Stream the assistant's reply as text chunks; the text is not parsed."""
    return client.stream(chat_messages(history, record))
