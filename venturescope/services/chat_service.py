"""Company chat threads with document-grounded answers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func

from venturescope.auth.tenant_context import OrgContext
from venturescope.core.exceptions import NotFoundError, ValidationError
from venturescope.llm.client import LLMClient, LLMMessage
from venturescope.llm.prompts import CompanyContext, DocumentContext, build_chat_system_prompt
from venturescope.models import (
    Assessment,
    AssessmentStatus,
    ChatMessage,
    ChatRole,
    ChatThread,
    Company,
    Document,
)
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20
DOCUMENT_LIMIT = 10
DOCUMENT_CHAR_LIMIT = 3000
CHAT_MAX_TOKENS = 2000

_CITATION_MARKER = re.compile(r"\[Source:\s*([^\]]+)\]", re.IGNORECASE)


def extract_citations(text: str, document_names: list[str]) -> list[dict[str, str]]:
    """Turn ``[Source: name]`` markers into ``{source, text}`` citations.

    The cited text is the sentence fragment preceding the marker. Each
    document is cited at most once, and markers naming unknown documents are skipped.
    """
    citations: list[dict[str, str]] = []
    cited: set[str] = set()
    for match in _CITATION_MARKER.finditer(text):
        source = match.group(1).strip().lower()
        document_name = next(
            (name for name in document_names if source in name.lower() or name.lower() in source),
            None,
        )
        if document_name is None or document_name in cited:
            continue
        before = text[: match.start()]
        sentence_start = max(before.rfind("."), before.rfind("!"), before.rfind("?")) + 1
        cited_text = before[sentence_start:].strip()
        if cited_text:
            citations.append({"source": document_name, "text": cited_text})
            cited.add(document_name)
    return citations


@dataclass(frozen=True)
class ChatExchange:
    user_message: ChatMessage
    assistant_message: ChatMessage


class ChatService(BaseService):
    """Threads are private to their creator and scoped to an org company."""

    def __init__(self, db=None, client: LLMClient | None = None) -> None:
        super().__init__(db)
        self._client = client

    @property
    def client(self) -> LLMClient:
        if self._client is None:
            self._client = LLMClient()
        return self._client

    def _company(self, context: OrgContext, company_id: int) -> Company:
        company = self.db.get(Company, company_id)
        if company is None or company.org_id != context.org_id:
            raise NotFoundError("Company not found")
        return company

    def _thread(self, context: OrgContext, thread_id: int) -> ChatThread:
        thread = (
            self.db.query(ChatThread)
            .join(Company, Company.id == ChatThread.company_id)
            .filter(
                ChatThread.id == thread_id,
                ChatThread.user_id == context.user_id,
                Company.org_id == context.org_id,
            )
            .first()
        )
        if thread is None:
            raise NotFoundError("Thread not found")
        return thread

    def list_threads(self, context: OrgContext, company_id: int) -> list[tuple[ChatThread, int]]:
        self._company(context, company_id)
        rows = (
            self.db.query(ChatThread, func.count(ChatMessage.id))
            .outerjoin(ChatMessage, ChatMessage.thread_id == ChatThread.id)
            .filter(ChatThread.company_id == company_id, ChatThread.user_id == context.user_id)
            .group_by(ChatThread.id)
            .order_by(ChatThread.updated_at.desc(), ChatThread.id.desc())
            .all()
        )
        return [(thread, int(count)) for thread, count in rows]

    def create_thread(self, context: OrgContext, company_id: int, title: str | None = None) -> ChatThread:
        company = self._company(context, company_id)
        thread = ChatThread(company_id=company.id, user_id=context.user_id, title=title or f"Chat about {company.name}")
        self.db.add(thread)
        self.commit()
        self.db.refresh(thread)
        return thread

    def list_messages(self, context: OrgContext, thread_id: int) -> list[ChatMessage]:
        self._thread(context, thread_id)
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.thread_id == thread_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .all()
        )

    def send_message(self, context: OrgContext, thread_id: int, content: str) -> ChatExchange:
        """Persist the user turn, ask the model with company context, persist the reply."""
        if not content or not content.strip():
            raise ValidationError("Message content required")
        thread = self._thread(context, thread_id)
        company = thread.company

        history = (
            self.db.query(ChatMessage)
            .filter(ChatMessage.thread_id == thread.id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(HISTORY_LIMIT)
            .all()
        )
        history.reverse()

        user_message = ChatMessage(thread_id=thread.id, role=ChatRole.USER, content=content, citations=[])
        self.db.add(user_message)
        self.commit()

        documents = self._document_context(company.id)
        system_prompt = build_chat_system_prompt(
            CompanyContext(
                name=company.name,
                stage=getattr(company.stage, "value", company.stage),
                sector=company.sector,
                description=company.description,
            ),
            documents,
            self._latest_assessment_summary(company.id),
        )
        messages = [LLMMessage(role=message.role.value, content=message.content) for message in history]
        messages.append(LLMMessage(role=ChatRole.USER.value, content=content))
        result = self.client.complete(
            messages,
            model=self.client.config.LLM_ASSESSMENT_MODEL,
            max_tokens=CHAT_MAX_TOKENS,
            system=system_prompt,
        )

        assistant_message = ChatMessage(
            thread_id=thread.id,
            role=ChatRole.ASSISTANT,
            content=result.text,
            citations=extract_citations(result.text, [doc.file_name for doc in documents]),
        )
        self.db.add(assistant_message)
        thread.updated_at = utcnow()
        self.commit()
        self.db.refresh(user_message)
        self.db.refresh(assistant_message)
        logger.info(
            "chat.message.answered",
            extra={
                "event": "chat.message.answered",
                "org_id": context.org_id,
                "thread_id": thread.id,
                "tokens_used": result.tokens_used,
                "citations": len(assistant_message.citations or []),
            },
        )
        return ChatExchange(user_message=user_message, assistant_message=assistant_message)

    def _document_context(self, company_id: int) -> list[DocumentContext]:
        documents = (
            self.db.query(Document)
            .filter(Document.company_id == company_id, Document.extracted_text.is_not(None))
            .order_by(Document.created_at.asc(), Document.id.asc())
            .limit(DOCUMENT_LIMIT)
            .all()
        )
        return [
            DocumentContext(
                file_name=doc.file_name,
                classification=getattr(doc.classification, "value", None) or "document",
                extracted_text=(doc.extracted_text or "")[:DOCUMENT_CHAR_LIMIT],
            )
            for doc in documents
        ]

    def _latest_assessment_summary(self, company_id: int) -> dict[str, Any] | None:
        assessment = (
            self.db.query(Assessment)
            .filter(Assessment.company_id == company_id, Assessment.status == AssessmentStatus.COMPLETED)
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
            .first()
        )
        if assessment is None:
            return None
        return {
            "overall_score": assessment.overall_score,
            "recommendation": getattr(assessment.recommendation, "value", None),
            "scores": assessment.scores,
        }
