"""
Deck API endpoints.

Deck creation, card list updates with automatic version snapshots,
version history and deck export.
"""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardport.db import (
    count_deck_versions,
    create_deck,
    create_deck_version,
    delete_deck_version,
    get_deck,
    get_deck_version,
    list_deck_holdings,
    list_deck_versions,
    replace_deck_cards,
    restore_deck_version,
    version_to_snapshot,
)
from cardport.db.database import get_session
from cardport.models.db import DeckDB, DeckVersionDB
from cardport.models.export import ExportFormat, ExportOptions
from cardport.models.versions import DEFAULT_CATEGORY, CardChange
from cardport.services.export_formatter import (
    EXPORT_CONTENT_TYPES,
    export_filename,
    format_export,
)
from cardport.services.version_diff import diff_snapshots, summarize_changes

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckCardModel(BaseModel):
    card_id: str
    quantity: int = Field(..., ge=1)
    category: str = DEFAULT_CATEGORY


class DeckCreateRequest(BaseModel):
    user_id: str
    name: str = Field(..., min_length=1)
    description: str | None = None
    cards: list[DeckCardModel] = Field(default_factory=list)


class DeckCardsUpdateRequest(BaseModel):
    cards: list[DeckCardModel]
    change_note: str | None = None


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: int
    user_id: str
    name: str
    current_version: int
    cards: list[DeckCardModel]


class VersionCreateRequest(BaseModel):
    change_note: str | None = None


class VersionResponse(BaseModel):
    version: int
    version_name: str
    change_note: str | None = None
    created_at: datetime | None = None
    card_count: int


class VersionListResponse(BaseModel):
    deck_id: int
    versions: list[VersionResponse]
    count: int


class VersionCardModel(BaseModel):
    card_id: str
    card_name: str
    quantity: int
    category: str
    cost: int | None = None


class VersionDetailResponse(BaseModel):
    """A stored version with its cards, ordered by category then name."""

    deck_id: int
    version: int
    version_name: str
    change_note: str | None = None
    created_at: datetime | None = None
    cards: list[VersionCardModel]
    card_count: int
    unique_cards: int
    total_cost: int


class VersionRestoreResponse(BaseModel):
    message: str
    restored_from_version: int
    backup_version: int
    deck: DeckResponse


class VersionDeleteResponse(BaseModel):
    message: str
    deck_id: int
    version: int


class CardChangeModel(BaseModel):
    type: str
    card_id: str
    card_name: str
    card_type: str | None = None
    rarity: str | None = None
    old_quantity: int | None = None
    new_quantity: int | None = None
    category: str

    @classmethod
    def from_change(cls, change: CardChange) -> "CardChangeModel":
        return cls(
            type=change.type.value,
            card_id=change.card_id,
            card_name=change.card_name,
            card_type=change.card.card_type,
            rarity=change.card.rarity,
            old_quantity=change.old_quantity,
            new_quantity=change.new_quantity,
            category=change.category,
        )


class DiffSummaryModel(BaseModel):
    added: int
    removed: int
    modified: int
    unchanged: int
    net_quantity_change: int


class VersionDiffResponse(BaseModel):
    deck_id: int
    from_version: int
    to_version: int
    changes: list[CardChangeModel]
    summary: DiffSummaryModel


def _deck_response(deck: DeckDB) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        user_id=deck.user_id,
        name=deck.name,
        current_version=deck.current_version,
        cards=[
            DeckCardModel(card_id=c.card_id, quantity=c.quantity, category=c.category)
            for c in deck.cards
        ],
    )


async def _require_deck(session: AsyncSession, deck_id: int) -> DeckDB:
    deck = await get_deck(session, deck_id)
    if deck is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck {deck_id} not found",
        )
    return deck


async def _require_version(session: AsyncSession, deck_id: int, version: int) -> DeckVersionDB:
    row = await get_deck_version(session, deck_id, version)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Version {version} of deck {deck_id} not found",
        )
    return row


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_user_deck(
    request: DeckCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Create a deck. No version exists until the first snapshot."""
    deck = await create_deck(
        session,
        request.user_id,
        request.name,
        [(c.card_id, c.quantity, c.category) for c in request.cards],
        description=request.description,
    )
    return _deck_response(deck)


@router.put("/{deck_id}/cards", response_model=DeckResponse)
async def update_deck_cards(
    deck_id: int,
    request: DeckCardsUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Replace a deck's cards.

    The current card list is snapshotted as a new version first, so every
    edit can be compared against what came before.
    """
    deck = await _require_deck(session, deck_id)
    await create_deck_version(
        session,
        deck,
        change_note=request.change_note or "Automatic version created before deck update",
    )
    deck = await replace_deck_cards(
        session, deck, [(c.card_id, c.quantity, c.category) for c in request.cards]
    )
    return _deck_response(deck)


@router.post(
    "/{deck_id}/versions",
    response_model=VersionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def snapshot_deck(
    deck_id: int,
    request: VersionCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VersionResponse:
    """Store the deck's current cards as the next version."""
    deck = await _require_deck(session, deck_id)
    version_number = await create_deck_version(session, deck, request.change_note)
    if version_number == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot create a version of an empty deck",
        )

    version = await get_deck_version(session, deck_id, version_number)
    if version is None:
        msg = f"Version {version_number} of deck {deck_id} not found after creation"
        raise RuntimeError(msg)

    return VersionResponse(
        version=version.version,
        version_name=version.version_name,
        change_note=version.change_note,
        created_at=version.created_at,
        card_count=sum(c.quantity for c in version.cards),
    )


@router.get("/{deck_id}/versions", response_model=VersionListResponse)
async def get_deck_versions(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VersionListResponse:
    """List a deck's versions, newest first."""
    await _require_deck(session, deck_id)
    versions = await list_deck_versions(session, deck_id)
    return VersionListResponse(
        deck_id=deck_id,
        versions=[
            VersionResponse(
                version=v.version,
                version_name=v.version_name,
                change_note=v.change_note,
                created_at=v.created_at,
                card_count=sum(c.quantity for c in v.cards),
            )
            for v in versions
        ],
        count=len(versions),
    )


@router.get(
    "/{deck_id}/versions/{from_version}/diff/{to_version}",
    response_model=VersionDiffResponse,
)
async def diff_deck_versions(
    deck_id: int,
    from_version: int,
    to_version: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VersionDiffResponse:
    """
    Compare two stored versions of a deck.

    Changes are sorted by card name. Quantities read as "old" from
    `from_version` and "new" from `to_version`.
    """
    older = await get_deck_version(session, deck_id, from_version)
    newer = await get_deck_version(session, deck_id, to_version)

    if older is None or newer is None:
        missing = [v for v, row in ((from_version, older), (to_version, newer)) if row is None]
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Version(s) {missing} of deck {deck_id} not found",
        )

    changes = diff_snapshots(version_to_snapshot(older), version_to_snapshot(newer))
    summary = summarize_changes(changes)

    return VersionDiffResponse(
        deck_id=deck_id,
        from_version=from_version,
        to_version=to_version,
        changes=[CardChangeModel.from_change(c) for c in changes],
        summary=DiffSummaryModel(
            added=summary.added,
            removed=summary.removed,
            modified=summary.modified,
            unchanged=summary.unchanged,
            net_quantity_change=summary.net_quantity_change,
        ),
    )


@router.get("/{deck_id}/versions/{version}", response_model=VersionDetailResponse)
async def get_version_detail(
    deck_id: int,
    version: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VersionDetailResponse:
    """A stored version's cards with count and cost totals."""
    row = await _require_version(session, deck_id, version)

    cards = sorted(
        (
            VersionCardModel(
                card_id=c.card_id,
                card_name=c.card.name,
                quantity=c.quantity,
                category=c.category or DEFAULT_CATEGORY,
                cost=c.card.cost,
            )
            for c in row.cards
        ),
        key=lambda c: (c.category, c.card_name),
    )

    return VersionDetailResponse(
        deck_id=deck_id,
        version=row.version,
        version_name=row.version_name,
        change_note=row.change_note,
        created_at=row.created_at,
        cards=cards,
        card_count=sum(c.quantity for c in cards),
        unique_cards=len(cards),
        total_cost=sum((c.cost or 0) * c.quantity for c in cards),
    )


@router.post("/{deck_id}/versions/{version}/restore", response_model=VersionRestoreResponse)
async def restore_version(
    deck_id: int,
    version: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VersionRestoreResponse:
    """
    Replace the deck's cards with a stored version's cards.

    The cards being replaced are kept as a new backup version, which
    becomes the deck's current version.
    """
    deck = await _require_deck(session, deck_id)
    row = await _require_version(session, deck_id, version)

    backup = await restore_deck_version(session, deck, row)

    return VersionRestoreResponse(
        message=f"Deck restored to version {version}",
        restored_from_version=version,
        backup_version=backup,
        deck=_deck_response(deck),
    )


@router.delete("/{deck_id}/versions/{version}", response_model=VersionDeleteResponse)
async def delete_version(
    deck_id: int,
    version: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VersionDeleteResponse:
    """Delete one stored version. A deck's only version cannot be deleted."""
    row = await _require_version(session, deck_id, version)

    if await count_deck_versions(session, deck_id) <= 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete the only version of a deck",
        )

    await delete_deck_version(session, row)
    return VersionDeleteResponse(
        message=f"Version {version} deleted successfully",
        deck_id=deck_id,
        version=version,
    )


@router.get("/{deck_id}/export")
async def export_deck(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    export_format: Annotated[ExportFormat, Query(alias="format")] = "decklist",
    custom_name: str | None = None,
) -> Response:
    """
    Export a deck's current cards as a downloadable file.

    Uses the collection export formats plus cockatrice. The deck name
    is used as the file and deck name unless custom_name is given.
    """
    deck = await _require_deck(session, deck_id)
    holdings = await list_deck_holdings(session, deck_id)

    options = ExportOptions(
        format=export_format,
        custom_name=custom_name or deck.name,
        description=deck.description,
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
