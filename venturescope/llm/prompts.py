"""Prompt templates for assessments, classification, and company chat."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CompanyContext:
    name: str
    stage: str | None = None
    sector: str | None = None
    raise_amount: float | None = None
    valuation: float | None = None
    description: str | None = None
    website: str | None = None


@dataclass(frozen=True)
class DocumentContext:
    file_name: str
    classification: str
    extracted_text: str


_DIMENSION_NAMES = ("market", "team", "product", "traction", "financials", "competitive")

_SCORING_GUIDE = """Guidelines for scoring:
- 80-100: Exceptional, best-in-class for stage
- 60-79: Strong, above average
- 40-59: Average, some concerns
- 20-39: Below average, significant concerns
- 0-19: Poor, major red flags or missing critical information

Guidelines for recommendation:
- strong_conviction: Exceptional opportunity, move quickly
- proceed: Solid opportunity that meets investment criteria
- conditional: Promising but specific concerns need resolution first
- pass: Does not meet investment criteria"""

CLASSIFICATION_LABELS = (
    "pitch_deck",
    "financials",
    "cap_table",
    "legal",
    "product_demo",
    "founder_video",
    "customer_reference",
    "other",
)


def _money(value: float | None) -> str:
    return f"${value:,.0f}" if value else "Not specified"


def _company_section(company: CompanyContext) -> str:
    return (
        "## Company Information\n"
        f"- **Name:** {company.name}\n"
        f"- **Stage:** {company.stage or 'Not specified'}\n"
        f"- **Sector:** {company.sector or 'Not specified'}\n"
        f"- **Raise Amount:** {_money(company.raise_amount)}\n"
        f"- **Valuation:** {_money(company.valuation)}\n"
        f"- **Description:** {company.description or 'Not provided'}\n"
        f"- **Website:** {company.website or 'Not provided'}\n"
    )


def _documents_section(documents: list[DocumentContext]) -> str:
    sections = [f"\n### {doc.file_name} ({doc.classification})\n{doc.extracted_text}\n" for doc in documents]
    return "## Available Documents\n" + "\n---\n".join(sections)


def _scores_schema(reasoning: str) -> dict[str, Any]:
    return {
        name: {
            "score": "<0-100>",
            "reasoning": reasoning,
            "strengths": ["Key strengths"],
            "concerns": ["Key concerns"],
        }
        for name in _DIMENSION_NAMES
    }


def build_screening_prompt(company: CompanyContext, documents: list[DocumentContext]) -> str:
    schema = {
        "summary": "A 2-3 sentence executive summary of the opportunity",
        "keyHighlights": ["3-5 most compelling positive aspects"],
        "redFlags": ["Any concerning issues or missing information"],
        "quickTake": "Your overall impression in 1-2 sentences",
        "recommendedNextSteps": ["What should be done next if proceeding"],
        "scores": _scores_schema("Brief explanation"),
        "recommendation": {
            "recommendation": "strong_conviction | proceed | conditional | pass",
            "confidence": "<0-100>",
            "primaryReasons": ["Top 3 reasons for this recommendation"],
        },
    }
    return (
        "You are an experienced venture capital analyst conducting a screening assessment of a "
        "startup investment opportunity. Provide a quick but thorough initial analysis.\n\n"
        f"{_company_section(company)}\n{_documents_section(documents)}\n\n"
        "## Your Task\nAnalyze the provided materials. Be direct, specific, and evidence-based.\n\n"
        f"Respond with a JSON object in this exact format:\n{json.dumps(schema, indent=2)}\n\n"
        f"{_SCORING_GUIDE}\n\nRespond ONLY with the JSON object, no additional text."
    )


def build_full_assessment_prompt(company: CompanyContext, documents: list[DocumentContext]) -> str:
    schema = {
        "content": {
            "executiveSummary": "3-4 paragraph summary of the investment opportunity",
            "companyOverview": {"description": "", "stage": "", "sector": "", "businessModel": ""},
            "marketAnalysis": {"marketSize": "", "marketTrends": [], "targetCustomer": "", "marketPosition": ""},
            "teamAnalysis": {"founderBackground": "", "teamStrengths": [], "teamGaps": [], "advisors": ""},
            "productAnalysis": {
                "productDescription": "",
                "valueProposition": "",
                "productStage": "",
                "technicalMoat": "",
                "roadmap": [],
            },
            "tractionAnalysis": {
                "currentMetrics": {"metric_name": "value"},
                "growthTrajectory": "",
                "customerFeedback": "",
                "partnerships": [],
            },
            "financialAnalysis": {
                "revenueModel": "",
                "unitEconomics": "",
                "burnRate": "",
                "runway": "",
                "fundingHistory": "",
                "useOfFunds": [],
            },
            "competitiveAnalysis": {
                "competitors": [{"name": "", "comparison": ""}],
                "differentiators": [],
                "defensibility": "",
            },
            "riskAssessment": {"keyRisks": [{"risk": "", "severity": "low|medium|high", "mitigation": ""}]},
            "investmentThesis": {"bullCase": [], "bearCase": [], "keyQuestions": []},
            "conclusion": "Final assessment and recommendation rationale",
        },
        "scores": _scores_schema("Detailed explanation with evidence"),
        "recommendation": {
            "recommendation": "strong_conviction | proceed | conditional | pass",
            "confidence": "<0-100>",
            "primaryReasons": ["Top 3-5 reasons for this recommendation"],
            "contingencies": ["If conditional, what needs to be true"],
        },
    }
    return (
        "You are a senior venture capital partner conducting a comprehensive due diligence "
        "assessment. Your analysis will be used by investment committee members.\n\n"
        f"{_company_section(company)}\n{_documents_section(documents)}\n\n"
        "## Your Task\nGenerate a comprehensive investment memo. Reference specific data points "
        "and note any gaps in information that would typically be expected.\n\n"
        f"Respond with a JSON object in this exact format:\n{json.dumps(schema, indent=2)}\n\n"
        f"{_SCORING_GUIDE}\n\nRespond ONLY with the JSON object, no additional text."
    )


def build_classification_prompt(file_name: str, content: str) -> str:
    labels = "\n".join(f"- {label}" for label in CLASSIFICATION_LABELS)
    return (
        "Classify this document into one of the following categories based on its content:\n\n"
        f"{labels}\n\nDocument: {file_name}\n\nContent preview:\n{content[:2000]}\n\n"
        'Respond with ONLY the classification label (e.g., "pitch_deck"), nothing else.'
    )


def build_chat_system_prompt(
    company: CompanyContext,
    documents: list[DocumentContext],
    assessment: dict[str, Any] | None = None,
) -> str:
    prompt = (
        f"You are an AI assistant helping a venture capital investor analyze {company.name}.\n\n"
        "## Company Information\n"
        f"- Name: {company.name}\n"
        f"- Stage: {company.stage or 'Not specified'}\n"
        f"- Sector: {company.sector or 'Not specified'}\n"
        f"- Description: {company.description or 'Not provided'}\n\n"
        "## Your Role\n"
        "- Answer questions about the company based on available documents and assessment data\n"
        "- When referencing information, cite the source document using [Source: document_name]\n"
        "- If information isn't available, say so clearly\n"
    )
    if documents:
        prompt += "\n## Available Documents\n"
        for doc in documents:
            prompt += f"\n### {doc.file_name} ({doc.classification})\n{doc.extracted_text}\n"
    if assessment:
        prompt += (
            "\n## Assessment Summary\n"
            f"- Overall Score: {assessment.get('overall_score')}/100\n"
            f"- Recommendation: {assessment.get('recommendation')}\n"
            f"- Key Scores: {json.dumps(assessment.get('scores'), indent=2, default=str)}\n"
        )
    prompt += (
        "\n## Guidelines\n"
        "1. Always cite your sources when referencing specific information from documents\n"
        "2. Be analytical and objective\n"
        "3. Keep responses focused and relevant to the question"
    )
    return prompt
