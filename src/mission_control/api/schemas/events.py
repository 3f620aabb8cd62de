# Runner event schemas.
# Created: 2026-09-17

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventDocument(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    content: str
    type: str
    path: str | None = None


class RunnerEvent(BaseModel):
    """One lifecycle event posted by the runner hook.

    The hook posts camelCase keys (``runId``, ``sessionKey``); snake_case is
    accepted too.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    run_id: str = Field(..., min_length=1)
    action: Literal["start", "progress", "end", "error", "document"]
    session_key: str | None = None
    agent_id: str | None = None
    timestamp: str | None = None
    prompt: str | None = None
    source: str | None = None
    message: str | None = None
    response: str | None = None
    error: str | None = None
    event_type: str | None = None
    document: EventDocument | None = None
