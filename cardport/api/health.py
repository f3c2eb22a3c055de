"""
Health check endpoints.

/health is a liveness check. /ready counts catalog cards, which proves the
database is reachable and the schema is in place; imports cannot resolve
anything against an empty catalog, so the count is reported too.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardport.db.database import get_session
from cardport.models.db import CatalogCardDB

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    catalog_cards: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check. Does not touch the database."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Ready once the catalog table can be queried. Returns 503 otherwise."""
    try:
        result = await session.execute(select(func.count(CatalogCardDB.id)))
        catalog_cards = result.scalar_one()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("readiness_check_failed", extra={"error_type": type(e).__name__})
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(status="ready", database="connected", catalog_cards=catalog_cards)
