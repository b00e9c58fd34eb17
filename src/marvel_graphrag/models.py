"""Request and response models for the web API and CLI."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class QueryRequest(BaseModel):
    """Request body for the query endpoint."""

    question: str = Field(..., description="Natural language question")

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question must not be empty")
        return value


class QueryResponse(BaseModel):
    """Everything produced while answering one question."""

    question: str
    cypher: str = ""
    results: str = ""
    row_count: int = 0
    execution_error: str | None = None
    narration: str = ""
    error: str | None = None
    timestamp: str = Field(default_factory=_utc_now)


class StatusResponse(BaseModel):
    """Reachability of the two backing services and whether data is loaded."""

    neo4j_connected: bool
    llm_connected: bool
    data_loaded: bool


class LoadResponse(BaseModel):
    """Outcome of a data load triggered from the web UI."""

    success: bool
    message: str
    nodes_merged: int = 0
    relationships_merged: int = 0
    rows_skipped: int = 0
    errors: int = 0
