"""Company chat endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.core.exceptions import ValidationError
from venturescope.llm.client import get_llm_client
from venturescope.schemas.chat import MessageCreateRequest, MessageResponse, ThreadCreateRequest, ThreadResponse
from venturescope.services.chat_service import ChatService

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("", response_model=list[ThreadResponse])
def list_threads(
    company_id: int | None = Query(default=None, alias="companyId"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[ThreadResponse]:
    user = authorize(db, authorization)
    if company_id is None:
        raise ValidationError("Company ID required")
    rows = ChatService(db).list_threads(user.org_context(), company_id)
    return [
        ThreadResponse.model_validate(thread).model_copy(update={"message_count": count})
        for thread, count in rows
    ]


@router.post("", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
def create_thread(
    payload: ThreadCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ThreadResponse:
    user = authorize(db, authorization, scopes=["chat.write"])
    thread = ChatService(db).create_thread(user.org_context(), payload.company_id, title=payload.title)
    return ThreadResponse.model_validate(thread)


@router.get("/{thread_id}/messages", response_model=list[MessageResponse])
def list_messages(
    thread_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[MessageResponse]:
    user = authorize(db, authorization)
    messages = ChatService(db).list_messages(user.org_context(), thread_id)
    return [MessageResponse.model_validate(message) for message in messages]


@router.post("/{thread_id}/messages")
def send_message(
    thread_id: int,
    payload: MessageCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> dict:
    user = authorize(db, authorization, scopes=["chat.write"])
    exchange = ChatService(db, client=get_llm_client()).send_message(user.org_context(), thread_id, payload.content)
    return {
        "userMessage": MessageResponse.model_validate(exchange.user_message).model_dump(mode="json"),
        "assistantMessage": MessageResponse.model_validate(exchange.assistant_message).model_dump(mode="json"),
    }
