"""API routes for the AI analyst.

POST /ai-analyst
    Grounded answer built from the user's own rows. Body: { message, userId }.
    Success: { message }. Failure: { error, message } with the fallback text.

POST /chat/local
    Offline keyword-matched answer. Body: { message }.

GET  /chat/history
    Stored exchange for the authenticated user.

GET  /chat/suggestions
    Greeting and suggested starter queries.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from insightdesk.api.deps import get_current_user_id
from insightdesk.core.errors import AppError
from insightdesk.core.local_assistant import GREETING, SUGGESTED_QUERIES, respond
from insightdesk.database import get_db
from insightdesk.schemas.chat import (
    ChatErrorResponse,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    LocalChatRequest,
)
from insightdesk.services import analyst

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

ANALYST_PATH = "/ai-analyst"


def analyst_error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": analyst.FALLBACK_MESSAGE},
    )


@router.post(
    ANALYST_PATH,
    response_model=ChatResponse,
    responses={
        400: {"model": ChatErrorResponse},
        500: {"model": ChatErrorResponse},
        502: {"model": ChatErrorResponse},
    },
)
async def ai_analyst(body: ChatRequest, db: Session = Depends(get_db)):
    try:
        reply = await analyst.answer(db, body.message, body.userId)
    except AppError as exc:
        logger.warning("ai-analyst failed for %s: %s", body.userId, exc.message)
        return analyst_error_response(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Error in ai-analyst: %s", exc)
        return analyst_error_response(500, "Internal error")
    return ChatResponse(message=reply)


@router.post("/chat/local", response_model=ChatResponse)
def local_chat(body: LocalChatRequest):
    return ChatResponse(message=respond(body.message))


@router.get("/chat/suggestions")
def suggestions():
    return {"greeting": GREETING, "suggestions": SUGGESTED_QUERIES}


@router.get("/chat/history", response_model=ChatHistoryResponse)
def chat_history(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return ChatHistoryResponse(userId=user_id, messages=analyst.get_history(db, user_id))
