from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from useragent_service.adapters.audit.in_memory import InMemorySelectionRecorder
from useragent_service.api.dependencies import get_audit_buffer, get_catalog_manager, get_selection_service
from useragent_service.core.errors import InvalidRequestError
from useragent_service.core.rate_limit import client_key_from_request, enforce_rate_limit
from useragent_service.schemas.user_agents import (
    RandomUserAgentData,
    RandomUserAgentResponse,
    SelectionLogData,
    SelectionLogItem,
    SelectionLogResponse,
    SelectionStatsData,
    SelectionStatsResponse,
    UserAgentItem,
    UserAgentListData,
    UserAgentListResponse,
)
from useragent_service.services.catalog import CatalogManager, Category, Entry
from useragent_service.services.selection_service import SelectionService

router = APIRouter(tags=["User Agents"], dependencies=[Depends(enforce_rate_limit)])

DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 1000


def _select(service: SelectionService, request: Request, category: Category) -> RandomUserAgentResponse:
    record = service.select(
        category,
        client_key=client_key_from_request(request),
        endpoint=request.url.path,
    )
    return RandomUserAgentResponse(
        data=RandomUserAgentData(user_agent=record.text, type=record.category),
    )


def _listing(entries: list[Entry], agent_type: str) -> UserAgentListResponse:
    return UserAgentListResponse(
        data=UserAgentListData(
            agents=[UserAgentItem(ua=e.text, pct=e.weight) for e in entries],
            count=len(entries),
            type=agent_type,
        )
    )


@router.get("/desktop", response_model=RandomUserAgentResponse)
def random_desktop(
    request: Request,
    service: SelectionService = Depends(get_selection_service),
) -> RandomUserAgentResponse:
    """Return a random desktop user agent."""
    return _select(service, request, Category.DESKTOP)


@router.get("/mobile", response_model=RandomUserAgentResponse)
def random_mobile(
    request: Request,
    service: SelectionService = Depends(get_selection_service),
) -> RandomUserAgentResponse:
    """Return a random mobile user agent."""
    return _select(service, request, Category.MOBILE)


@router.get("/random", response_model=RandomUserAgentResponse)
def random_any(
    request: Request,
    service: SelectionService = Depends(get_selection_service),
) -> RandomUserAgentResponse:
    """Return a user agent drawn from desktop and mobile combined.

    Each catalog entry is equally likely, so the larger catalog is picked
    proportionally more often.
    """
    return _select(service, request, Category.RANDOM)


@router.get("/all/desktop", response_model=UserAgentListResponse)
def all_desktop(manager: CatalogManager = Depends(get_catalog_manager)) -> UserAgentListResponse:
    return _listing(manager.all_desktop(), Category.DESKTOP.value)


@router.get("/all/mobile", response_model=UserAgentListResponse)
def all_mobile(manager: CatalogManager = Depends(get_catalog_manager)) -> UserAgentListResponse:
    return _listing(manager.all_mobile(), Category.MOBILE.value)


@router.get("/logs", response_model=SelectionLogResponse)
def recent_selections(
    limit: int = Query(DEFAULT_LOG_LIMIT, description="Number of records (1-1000)."),
    agent_type: Category | None = Query(None, alias="type", description="Filter by catalog."),
    buffer: InMemorySelectionRecorder = Depends(get_audit_buffer),
) -> SelectionLogResponse:
    """Return the most recent selections served by this process.

    Raises:
        InvalidRequestError: 400 if limit is outside 1..1000.
    """
    if limit < 1 or limit > MAX_LOG_LIMIT:
        raise InvalidRequestError(
            code="invalid_limit",
            message=f"invalid limit parameter (must be between 1 and {MAX_LOG_LIMIT})",
        )

    records = buffer.recent(limit, category=agent_type.value if agent_type else None)
    return SelectionLogResponse(
        data=SelectionLogData(
            logs=[
                SelectionLogItem(
                    user_agent=r.text,
                    agent_type=r.category,
                    requested_at=r.timestamp.isoformat(),
                    endpoint=r.endpoint,
                )
                for r in records
            ],
            count=len(records),
        )
    )


@router.get("/stats", response_model=SelectionStatsResponse)
def selection_stats(buffer: InMemorySelectionRecorder = Depends(get_audit_buffer)) -> SelectionStatsResponse:
    """Return aggregated selection counts for this process."""
    return SelectionStatsResponse(data=SelectionStatsData(**buffer.stats()))
