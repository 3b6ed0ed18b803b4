"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from venturescope.api.v1 import (
    assessments,
    auth,
    billing,
    chat,
    companies,
    documents,
    health,
    ic_rounds,
    intake,
    submissions,
    team,
    user,
)
from venturescope.core.config import get_config

api_router = APIRouter(prefix=get_config().API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(companies.router)
api_router.include_router(documents.router)
api_router.include_router(assessments.router)
api_router.include_router(chat.router)
api_router.include_router(billing.router)
api_router.include_router(submissions.router)
api_router.include_router(intake.router)
api_router.include_router(team.router)
api_router.include_router(user.router)
api_router.include_router(ic_rounds.router)


def get_api_router() -> APIRouter:
    return api_router
