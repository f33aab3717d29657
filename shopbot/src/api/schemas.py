"""Pydantic schemas for API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request schema for one chat turn."""

    message: str = Field(default="", description="User message; blank messages are rejected with 400")


class ChatResponse(BaseModel):
    """Response schema for one chat turn."""

    reply: str
    images: list[str] | None = None


class KnowledgeBaseHealth(BaseModel):
    path: str
    loaded: bool
    chunks: int
    embedded_chunks: int
    last_modified: float | None
    loaded_at: float | None
    shop_name: str
    reloads: int


class HealthResponse(BaseModel):
    status: str = "ok"
    retrieval: str
    reload_mode: str
    knowledge_base: KnowledgeBaseHealth
