"""Pydantic schemas for user-agent API responses."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

AgentType = Literal["desktop", "mobile", "random"]


class UserAgentItem(BaseModel):
    """Catalog entry as exposed over HTTP."""

    ua: str = Field(..., description="User-agent string.")
    pct: float = Field(..., description="Declared prevalence in percent (advisory only).")


class RandomUserAgentData(BaseModel):
    user_agent: str = Field(..., description="The selected user-agent string.")
    type: AgentType = Field(..., description="Catalog the string was drawn from.")


class RandomUserAgentResponse(BaseModel):
    """Envelope for a single random selection."""

    success: bool = True
    data: RandomUserAgentData


class UserAgentListData(BaseModel):
    agents: List[UserAgentItem] = Field(default_factory=list)
    count: int = Field(..., description="Number of entries in the catalog.")
    type: Literal["desktop", "mobile"]


class UserAgentListResponse(BaseModel):
    """Envelope for a full catalog listing."""

    success: bool = True
    data: UserAgentListData


class SelectionLogItem(BaseModel):
    user_agent: str
    agent_type: AgentType
    requested_at: str = Field(..., description="ISO-8601 UTC timestamp.")
    endpoint: str


class SelectionLogData(BaseModel):
    logs: List[SelectionLogItem] = Field(default_factory=list)
    count: int


class SelectionLogResponse(BaseModel):
    """Recent selections, newest first.

    Client addresses are never included.
    """

    success: bool = True
    data: SelectionLogData


class SelectionStatsData(BaseModel):
    total_requests: int
    desktop_requests: int
    mobile_requests: int
    random_requests: int
    unique_clients: int
    last_request: str | None = None


class SelectionStatsResponse(BaseModel):
    success: bool = True
    data: SelectionStatsData
