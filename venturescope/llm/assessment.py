"""Assessment generation: prompt, call, parse, and score."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from venturescope.core.exceptions import ExternalServiceError
from venturescope.llm.client import LLMClient, LLMMessage
from venturescope.llm.prompts import (
    CLASSIFICATION_LABELS,
    CompanyContext,
    DocumentContext,
    build_classification_prompt,
    build_full_assessment_prompt,
    build_screening_prompt,
)
from venturescope.models.enums import AssessmentType, Recommendation

logger = logging.getLogger(__name__)

SCORE_WEIGHTS: dict[str, float] = {
    "market": 0.20,
    "team": 0.25,
    "product": 0.20,
    "traction": 0.15,
    "financials": 0.10,
    "competitive": 0.10,
}

TOKEN_LIMITS = {
    AssessmentType.SCREENING: 4000,
    AssessmentType.FULL: 8000,
    "classification": 500,
}

_SCREENING_CONTENT_KEYS = ("summary", "keyHighlights", "redFlags", "quickTake", "recommendedNextSteps")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class GeneratedAssessment:
    content: dict[str, Any]
    scores: dict[str, Any]
    recommendation: Recommendation | None
    recommendation_detail: dict[str, Any]
    overall_score: int
    processing_time_ms: int
    tokens_used: int


def parse_assessment_response(text: str) -> dict[str, Any]:
    """Parse model output as JSON: whole text, then a fenced block, then the outermost brace span."""
    candidates = [text]
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    span = _OBJECT_SPAN.search(text)
    if span:
        candidates.append(span.group(0))
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(parsed, dict):
            return parsed
    raise ExternalServiceError("Could not parse JSON response from language model")


def calculate_overall_score(scores: dict[str, Any] | None) -> int:
    """Weighted mean of present dimension scores, renormalized over the dimensions present."""
    weighted_sum = 0.0
    total_weight = 0.0
    for dimension, weight in SCORE_WEIGHTS.items():
        entry = (scores or {}).get(dimension)
        score = entry.get("score") if isinstance(entry, dict) else None
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            weighted_sum += score * weight
            total_weight += weight
    if total_weight == 0:
        return 0
    return round(weighted_sum / total_weight)


def _coerce_recommendation(detail: dict[str, Any]) -> Recommendation | None:
    try:
        return Recommendation(str(detail.get("recommendation", "")).strip().lower())
    except ValueError:
        return None


def generate_assessment(
    assessment_type: AssessmentType,
    company: CompanyContext,
    documents: list[DocumentContext],
    client: LLMClient | None = None,
) -> GeneratedAssessment:
    client = client or LLMClient()
    started = perf_counter()
    if assessment_type == AssessmentType.SCREENING:
        prompt = build_screening_prompt(company, documents)
    else:
        prompt = build_full_assessment_prompt(company, documents)

    result = client.complete(
        [LLMMessage(role="user", content=prompt)],
        model=client.config.LLM_ASSESSMENT_MODEL,
        max_tokens=TOKEN_LIMITS[assessment_type],
    )
    parsed = parse_assessment_response(result.text)

    if assessment_type == AssessmentType.SCREENING:
        content = {key: parsed.get(key) for key in _SCREENING_CONTENT_KEYS}
    else:
        content = parsed.get("content") or {}
    scores = parsed.get("scores") or {}
    detail = parsed.get("recommendation") or {}
    if not isinstance(detail, dict):
        detail = {"recommendation": detail}

    return GeneratedAssessment(
        content=content,
        scores=scores,
        recommendation=_coerce_recommendation(detail),
        recommendation_detail=detail,
        overall_score=calculate_overall_score(scores),
        processing_time_ms=int((perf_counter() - started) * 1000),
        tokens_used=result.tokens_used,
    )


def classify_document_with_ai(file_name: str, content: str, client: LLMClient | None = None) -> str:
    """Ask the classification model for a label; anything unexpected becomes ``other``."""
    client = client or LLMClient()
    result = client.complete(
        [LLMMessage(role="user", content=build_classification_prompt(file_name, content))],
        model=client.config.LLM_CLASSIFICATION_MODEL,
        max_tokens=TOKEN_LIMITS["classification"],
    )
    label = result.text.strip().strip('"').lower()
    return label if label in CLASSIFICATION_LABELS else "other"
