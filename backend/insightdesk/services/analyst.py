"""Grounded AI analyst.

Answers a user's question from their own rows only:

1. Load connected data sources, the 20 most recent metric samples and the 10
   most recent insights for the user.
2. Render them into a deterministic text context block.
3. Send an analyst system prompt (with the context) plus the question to the
   configured LLM client.
4. Replace the user's stored conversation with this two-turn exchange.

Exposed functions
-----------------
answer(db, message, user_id, client=None) -> str
build_data_context(sources, samples, insights) -> str
get_history(db, user_id) -> list[dict]
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Sequence

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from insightdesk.core.errors import ValidationError
from insightdesk.database import storage_errors
from insightdesk.models.chat_conversation import ChatConversation
from insightdesk.models.data_source import DataSource, DataSourceStatus
from insightdesk.models.insight import Insight
from insightdesk.models.metric_sample import MetricSample
from insightdesk.services.llm_client import CONTEXT_MARKER, BaseLLMAdapter, get_llm_client

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = (
    "I'm having trouble processing your request right now. Please try again later."
)

NO_SOURCES = "No data sources connected yet."
NO_ANALYTICS = "No analytics data available."
NO_INSIGHTS = "No insights generated yet."

CONTEXT_METRIC_LIMIT = 20
CONTEXT_INSIGHT_LIMIT = 10
_TITLE_MAX_CHARS = 60


# ── Context building ──────────────────────────────────────────────────


def _fmt_time(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _fmt_number(value: float | int) -> str:
    # 1200.0 renders as "1200" so the model sees the figure as stored
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_data_context(
    sources: Sequence[Any],
    samples: Sequence[Any],
    insights: Sequence[Any],
) -> str:
    parts = ["Connected Data Sources:"]
    if sources:
        parts.append(
            "\n".join(
                f"- {s.name} ({s.type}): Last synced "
                f"{_fmt_time(s.lastSync) if s.lastSync else 'Never'}"
                for s in sources
            )
        )
    else:
        parts.append(NO_SOURCES)

    parts.append("\nRecent Analytics Data:")
    if samples:
        parts.append(
            "\n".join(
                f"- {m.metricName}: {_fmt_number(m.metricValue)} "
                f"({_fmt_time(m.dateRecorded)})"
                for m in samples
            )
        )
    else:
        parts.append(NO_ANALYTICS)

    parts.append("\nRecent Insights:")
    if insights:
        parts.append(
            "\n".join(f"- {i.title}: {i.description}" for i in insights)
        )
    else:
        parts.append(NO_INSIGHTS)

    return "\n".join(parts)


def build_system_prompt(data_context: str) -> str:
    return f"""You are an AI Data Analyst for a business analytics platform. You help users understand their business data and provide actionable insights.

IMPORTANT INSTRUCTIONS:
- Only use real data that is provided in the context below
- If no relevant data is available, clearly state "I don't have that data yet" and suggest connecting relevant data sources
- Never make up or hallucinate data, metrics, or insights
- Be helpful in explaining what data would be needed to answer questions
- Suggest specific data sources that could be connected to get the information they're asking for

{CONTEXT_MARKER}
{data_context}

Be concise, helpful, and data-driven in your responses. If the user asks about specific metrics that aren't in the available data, tell them exactly what data source would need to be connected to get that information."""


def load_context_rows(
    db: Session, user_id: str
) -> tuple[list[DataSource], list[MetricSample], list[Insight]]:
    with storage_errors(db, "Failed to load account data"):
        sources = (
            db.query(DataSource)
            .filter(
                DataSource.userId == user_id,
                DataSource.status == DataSourceStatus.CONNECTED,
            )
            .all()
        )
        samples = (
            db.query(MetricSample)
            .filter(MetricSample.userId == user_id)
            .order_by(MetricSample.createdAt.desc(), MetricSample.dateRecorded.desc())
            .limit(CONTEXT_METRIC_LIMIT)
            .all()
        )
        insights = (
            db.query(Insight)
            .filter(Insight.userId == user_id)
            .order_by(Insight.createdAt.desc())
            .limit(CONTEXT_INSIGHT_LIMIT)
            .all()
        )
    return sources, samples, insights


# ── Conversation persistence ──────────────────────────────────────────


def save_exchange(
    db: Session, user_id: str, message: str, reply: str
) -> ChatConversation:
    """Replace the user's stored conversation with the latest exchange."""
    now = datetime.now(timezone.utc)
    turns = [
        {"role": "user", "content": message, "timestamp": now.isoformat()},
        {"role": "assistant", "content": reply, "timestamp": now.isoformat()},
    ]
    with storage_errors(db, "Failed to save conversation"):
        convo = (
            db.query(ChatConversation)
            .filter(ChatConversation.userId == user_id)
            .first()
        )
        if convo is None:
            convo = ChatConversation(userId=user_id)
            db.add(convo)
        convo.title = message[:_TITLE_MAX_CHARS]
        convo.messages = turns
        convo.updatedAt = now
        db.commit()
        db.refresh(convo)
    return convo


def get_history(db: Session, user_id: str) -> list[dict]:
    with storage_errors(db, "Failed to load conversation"):
        convo = (
            db.query(ChatConversation)
            .filter(ChatConversation.userId == user_id)
            .first()
        )
    if convo is None:
        return []
    return list(convo.messages or [])


# ── Entry point ───────────────────────────────────────────────────────


async def answer(
    db: Session,
    message: str | None,
    user_id: str | None,
    client: BaseLLMAdapter | None = None,
) -> str:
    if not message or not message.strip() or not user_id or not user_id.strip():
        raise ValidationError("Message and userId are required")

    # Session work runs in the threadpool; only the completion call is awaited here
    sources, samples, insights = await run_in_threadpool(load_context_rows, db, user_id)
    data_context = build_data_context(sources, samples, insights)
    logger.info(
        "Analyst context for %s: sources=%d metrics=%d insights=%d",
        user_id,
        len(sources),
        len(samples),
        len(insights),
    )

    client = client or get_llm_client()
    reply = await client.invoke(build_system_prompt(data_context), message, user_id=user_id)

    await run_in_threadpool(save_exchange, db, user_id, message, reply)
    return reply
