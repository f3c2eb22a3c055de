"""
Collection API endpoints.

Bulk import (preview and commit) and export of user card collections.
"""

import logging
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from cardport.config import settings
from cardport.db import (
    CollectionHoldings,
    get_or_create_collection,
    list_holdings,
)
from cardport.db.database import get_session
from cardport.models.entries import CardEntry, ParseError, entries_of, errors_of
from cardport.models.export import ExportFormat, ExportOptions
from cardport.models.failure import FailureKind, KnownError
from cardport.models.reconciliation import ImportResult, UpdatePolicy
from cardport.parsers import ImportFormat, parse_import
from cardport.services.card_finder import CatalogCardResolver
from cardport.services.export_formatter import (
    EXPORT_CONTENT_TYPES,
    export_filename,
    format_export,
)
from cardport.services.preview import build_preview
from cardport.services.reconciliation import check_batch_size, reconcile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collection", tags=["collection"])


class CardEntryModel(BaseModel):
    line: int
    card_name: str
    quantity: int
    set_name: str | None = None
    set_number: str | None = None
    card_id: str | None = None

    @classmethod
    def from_entry(cls, entry: CardEntry) -> "CardEntryModel":
        return cls(
            line=entry.source_line,
            card_name=entry.card_name,
            quantity=entry.quantity,
            set_name=entry.set_name,
            set_number=entry.set_number,
            card_id=entry.card_id,
        )


class ParseErrorModel(BaseModel):
    line: int
    error: str
    suggestion: str | None = None

    @classmethod
    def from_error(cls, error: ParseError) -> "ParseErrorModel":
        return cls(line=error.line, error=error.message, suggestion=error.suggestion)


def normalize_format_name(value: Any) -> Any:
    """Accept format names in any case, with surrounding whitespace."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


class ImportPreviewRequest(BaseModel):
    """Request model for an import preview."""

    format: ImportFormat
    data: Any = Field(
        ...,
        description="Raw text, or a JSON array when format is 'json'",
        examples=["// My deck\n3 Nu Gundam\n2x Char's Zaku II"],
    )
    max_items: int | None = Field(
        default=None,
        ge=1,
        description="Number of source lines to scan (defaults to the server preview limit)",
    )

    @field_validator("format", mode="before")
    @classmethod
    def lowercase_format(cls, value: Any) -> Any:
        return normalize_format_name(value)


class ImportPreviewResponse(BaseModel):
    entries: list[CardEntryModel]
    errors: list[ParseErrorModel]
    ready: bool


class ImportOptionsModel(BaseModel):
    update_behavior: UpdatePolicy = Field(
        default=UpdatePolicy.ADD,
        description="add: sum quantities, replace: overwrite, skip: keep existing",
    )


class ImportRequest(BaseModel):
    """Request model for a bulk import."""

    format: ImportFormat
    data: Any = Field(..., description="Raw text, or a JSON array when format is 'json'")
    options: ImportOptionsModel = Field(default_factory=ImportOptionsModel)

    @field_validator("format", mode="before")
    @classmethod
    def lowercase_format(cls, value: Any) -> Any:
        return normalize_format_name(value)


class ImportedCardModel(BaseModel):
    card_name: str
    quantity: int
    action: Literal["added", "updated"]


class ImportResultModel(BaseModel):
    success: int
    failed: int
    skipped: int
    errors: list[str]
    imported: list[ImportedCardModel]

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResultModel":
        return cls(
            success=result.success_count,
            failed=result.failed_count,
            skipped=result.skipped_count,
            errors=result.errors,
            imported=[
                ImportedCardModel(
                    card_name=card.card_name,
                    quantity=card.quantity,
                    action=card.action.value,
                )
                for card in result.imported
            ],
        )


class ImportSummary(BaseModel):
    total_processed: int
    successful: int
    failed: int
    skipped: int
    parse_errors: int


class ImportResponse(BaseModel):
    """Response model for a bulk import."""

    user_id: str
    message: str = "Import completed"
    result: ImportResultModel
    summary: ImportSummary
    parse_errors: list[ParseErrorModel] = Field(
        default_factory=list,
        description="Lines rejected before reconciliation (not counted in result)",
    )


class HoldingModel(BaseModel):
    card_id: str
    card_name: str
    quantity: int
    set_name: str | None = None
    set_number: str | None = None


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    cards: list[HoldingModel] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0


@router.get("/{user_id}", response_model=CollectionResponse)
async def get_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Get a user's card collection.

    Returns an empty collection if the user has not imported anything yet.
    """
    holdings = await list_holdings(session, user_id) or []
    return CollectionResponse(
        user_id=user_id,
        cards=[
            HoldingModel(
                card_id=h.card_id,
                card_name=h.card_name,
                quantity=h.quantity,
                set_name=h.set_name,
                set_number=h.set_number,
            )
            for h in holdings
        ],
        total_cards=sum(h.quantity for h in holdings),
        unique_cards=len(holdings),
    )


@router.post("/{user_id}/import/preview", response_model=ImportPreviewResponse)
async def preview_import(user_id: str, request: ImportPreviewRequest) -> ImportPreviewResponse:
    """
    Validate the start of an import without touching the collection.

    Scans only the first `max_items` source lines and reports every
    parse error found there.
    """
    preview = build_preview(
        request.format,
        request.data,
        request.max_items or settings.preview_limit,
    )
    return ImportPreviewResponse(
        entries=[CardEntryModel.from_entry(e) for e in preview.entries],
        errors=[ParseErrorModel.from_error(e) for e in preview.errors],
        ready=preview.ready,
    )


@router.post("/{user_id}/import", response_model=ImportResponse)
async def import_user_collection(
    user_id: str,
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """
    Bulk import cards into a user's collection.

    Supported formats: csv (or tab-separated), json, decklist, mtga.

    The whole input is parsed first. Rejected lines are returned in
    `parse_errors` and never reach reconciliation. Valid entries are
    resolved against the catalog and merged under `update_behavior`;
    cards that cannot be resolved are counted as failed without stopping
    the batch.
    """
    if request.data is None or (isinstance(request.data, str) and not request.data.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Format and data are required",
        )

    results = parse_import(request.format, request.data)
    entries = entries_of(results)
    parse_errors = errors_of(results)

    if not entries:
        first = parse_errors[0] if parse_errors else None
        raise KnownError(
            kind=FailureKind.PARSE_FAILED if first else FailureKind.EMPTY_RESULT,
            message="No valid cards found in import data",
            detail=f"Line {first.line}: {first.message}" if first else None,
            suggestion=first.suggestion if first else None,
        )

    check_batch_size(entries, settings.import_batch_limit)

    collection, _ = await get_or_create_collection(session, user_id)
    result = await reconcile(
        entries,
        CatalogCardResolver(session),
        CollectionHoldings(session, collection.id),
        request.options.update_behavior,
    )

    logger.info(
        "collection_imported",
        extra={
            "user_id": user_id,
            "format": request.format,
            "entry_count": len(entries),
            "parse_error_count": len(parse_errors),
        },
    )

    return ImportResponse(
        user_id=user_id,
        result=ImportResultModel.from_result(result),
        summary=ImportSummary(
            total_processed=result.total_processed,
            successful=result.success_count,
            failed=result.failed_count,
            skipped=result.skipped_count,
            parse_errors=len(parse_errors),
        ),
        parse_errors=[ParseErrorModel.from_error(e) for e in parse_errors],
    )


@router.get("/{user_id}/export")
async def export_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    export_format: Annotated[ExportFormat, Query(alias="format")] = "json",
    include_metadata: bool = False,
    include_conditions: bool = False,
    include_values: bool = False,
    only_owned: bool = False,
    custom_name: str | None = None,
) -> Response:
    """
    Export a user's collection as a downloadable text file.

    Formats: csv, json, decklist, txt, mtga, cockatrice.
    """
    holdings = await list_holdings(session, user_id)
    if holdings is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Collection not found",
        )

    options = ExportOptions(
        format=export_format,
        include_metadata=include_metadata,
        include_conditions=include_conditions,
        include_values=include_values,
        only_owned=only_owned,
        custom_name=custom_name,
    )
    content = format_export(holdings, options)
    filename = export_filename(options, datetime.now(UTC).date())

    return Response(
        content=content,
        media_type=EXPORT_CONTENT_TYPES[export_format],
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )
