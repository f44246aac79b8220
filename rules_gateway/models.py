"""
Pydantic models for the rules gateway.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Identity(BaseModel):
    id: str
    email: Optional[str] = None


class Info(BaseModel):
    version: str
    os: str = ""
    upTimeSeconds: int = 0


class StreamField(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name")
    field_type: Any = Field(None, alias="FieldType")


class Stream(BaseModel):
    """Stream as described by the Kuiper stream view endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name")
    stream_fields: List[StreamField] = Field(default_factory=list, alias="StreamFields")
    options: Dict[str, Any] = Field(default_factory=dict, alias="Options")

    @field_validator("stream_fields", "options", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any, info) -> Any:
        # Kuiper sends null for streams declared without a schema
        if value is None:
            return [] if info.field_name == "stream_fields" else {}
        return value


class MainfluxSink(BaseModel):
    host: str = ""
    port: int = 0
    channel: str
    subtopic: str = ""
    username: str = ""
    password: str = ""


class Action(BaseModel):
    mainflux: MainfluxSink


class Rule(BaseModel):
    id: str
    sql: str
    actions: List[Action] = Field(default_factory=list)


class StreamRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Stream name without namespace")
    topic: str = Field(..., min_length=1, description="Channel feeding the stream")
    row: str = Field(..., min_length=1, description="Row schema, e.g. 'v float, n string'")


class StreamUpdateRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    row: str = Field(..., min_length=1)


class RuleRequest(Rule):
    @field_validator("actions")
    @classmethod
    def ensure_actions(cls, value: List[Action]) -> List[Action]:
        if not value:
            raise ValueError("actions must not be empty")
        return value


class ResultResponse(BaseModel):
    result: str


class StreamListResponse(BaseModel):
    streams: List[str]
