from typing import Literal

from pydantic import BaseModel


class ChatRequest(BaseModel):
    # Optional here so a missing field reaches the uniform error payload
    message: str | None = None
    userId: str | None = None


class LocalChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    message: str


class ChatErrorResponse(BaseModel):
    error: str
    message: str


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: str


class ChatHistoryResponse(BaseModel):
    userId: str
    messages: list[ChatTurn]
