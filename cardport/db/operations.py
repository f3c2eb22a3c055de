"""
Database CRUD operations.

Provides async functions for catalog lookups, collection holdings, and
deck version snapshots.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardport.models.db import (
    CardSetDB,
    CatalogCardDB,
    CollectionCardDB,
    DeckCardDB,
    DeckDB,
    DeckVersionCardDB,
    DeckVersionDB,
    UserCollectionDB,
)
from cardport.models.export import Holding
from cardport.models.versions import (
    DEFAULT_CATEGORY,
    CardDescriptor,
    SnapshotCard,
    VersionSnapshot,
)

logger = logging.getLogger(__name__)

# --- Catalog Operations ---


async def get_catalog_card(session: AsyncSession, card_id: str) -> CatalogCardDB | None:
    return await session.get(CatalogCardDB, card_id)


async def find_card_set(session: AsyncSession, name_or_code: str) -> CardSetDB | None:
    """Find a set whose name or code matches, case-insensitively."""
    needle = name_or_code.lower()
    result = await session.execute(
        select(CardSetDB)
        .where(or_(func.lower(CardSetDB.name) == needle, func.lower(CardSetDB.code) == needle))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def find_card_by_set_number(
    session: AsyncSession, set_id: str, set_number: str
) -> CatalogCardDB | None:
    result = await session.execute(
        select(CatalogCardDB).where(
            CatalogCardDB.set_id == set_id,
            CatalogCardDB.set_number == set_number,
        )
    )
    return result.scalar_one_or_none()


async def find_card_by_name(session: AsyncSession, name: str) -> CatalogCardDB | None:
    """
    Find a card by exact name, case-insensitively.

    When several printings share a name, the lowest id wins so the choice
    is stable between calls.
    """
    result = await session.execute(
        select(CatalogCardDB)
        .where(func.lower(CatalogCardDB.name) == name.lower())
        .order_by(CatalogCardDB.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def add_catalog_card(
    session: AsyncSession,
    name: str,
    card_set: CardSetDB | None = None,
    set_number: str | None = None,
    card_type: str | None = None,
    rarity: str | None = None,
    cost: int | None = None,
    market_price: float | None = None,
    card_id: str | None = None,
) -> CatalogCardDB:
    """Insert a catalog card (used for seeding)."""
    card = CatalogCardDB(
        name=name,
        card_set=card_set,
        set_number=set_number,
        card_type=card_type,
        rarity=rarity,
        cost=cost,
        market_price=market_price,
    )
    if card_id is not None:
        card.id = card_id
    session.add(card)
    await session.flush()
    return card


async def add_card_set(session: AsyncSession, name: str, code: str) -> CardSetDB:
    card_set = CardSetDB(name=name, code=code)
    session.add(card_set)
    await session.flush()
    return card_set


# --- Collection Operations ---


async def get_collection(session: AsyncSession, user_id: str) -> UserCollectionDB | None:
    """
    Get a user's collection by user_id.

    Returns None if no collection exists for this user.
    """
    result = await session.execute(
        select(UserCollectionDB)
        .where(UserCollectionDB.user_id == user_id)
        .options(
            selectinload(UserCollectionDB.cards)
            .selectinload(CollectionCardDB.card)
            .selectinload(CatalogCardDB.card_set)
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_collection(session: AsyncSession, user_id: str) -> UserCollectionDB:
    """
    Create a new collection for a user.

    Raises IntegrityError if collection already exists.
    """
    collection = UserCollectionDB(user_id=user_id)
    session.add(collection)
    await session.flush()
    return collection


async def get_or_create_collection(
    session: AsyncSession, user_id: str
) -> tuple[UserCollectionDB, bool]:
    """
    Get existing collection or create new one.

    Returns:
        Tuple of (collection, created) where created is True if new.
    """
    collection = await get_collection(session, user_id)
    if collection:
        return collection, False

    collection = await create_collection(session, user_id)
    return collection, True


class CollectionHoldings:
    """
    HoldingsStore backed by one collection's rows.

    Quantities are keyed by catalog card id.
    """

    def __init__(self, session: AsyncSession, collection_id: int) -> None:
        self._session = session
        self._collection_id = collection_id

    async def _row(self, card_id: str) -> CollectionCardDB | None:
        result = await self._session.execute(
            select(CollectionCardDB).where(
                CollectionCardDB.collection_id == self._collection_id,
                CollectionCardDB.card_id == card_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, card_id: str) -> int | None:
        row = await self._row(card_id)
        return row.quantity if row is not None else None

    async def upsert(self, card_id: str, quantity: int) -> None:
        """
        Write one holding inside a savepoint.

        A failed write rolls back only this card; the surrounding import
        transaction stays usable for the remaining entries.
        """
        row = await self._row(card_id)
        async with self._session.begin_nested():
            if row is None:
                self._session.add(
                    CollectionCardDB(
                        collection_id=self._collection_id,
                        card_id=card_id,
                        quantity=quantity,
                    )
                )
            else:
                row.quantity = quantity
            await self._session.flush()


async def list_holdings(session: AsyncSession, user_id: str) -> list[Holding] | None:
    """
    Load a user's holdings for export, ordered by set, set number, then name.

    Returns None if the user has no collection.
    """
    collection = await get_collection(session, user_id)
    if collection is None:
        return None

    holdings = [collection_card_to_holding(row) for row in collection.cards]
    holdings.sort(key=lambda h: (h.set_name or "", h.set_number or "", h.card_name))
    return holdings


def collection_card_to_holding(row: CollectionCardDB) -> Holding:
    """Convert a collection row (with card and set loaded) to a Holding."""
    card = row.card
    card_set = card.card_set
    return Holding(
        card_id=card.id,
        card_name=card.name,
        quantity=row.quantity,
        set_name=card_set.name if card_set else None,
        set_code=card_set.code if card_set else None,
        set_number=card.set_number,
        card_type=card.card_type,
        rarity=card.rarity,
        condition=row.condition,
        market_price=card.market_price,
        added_at=row.created_at,
        updated_at=row.updated_at,
    )


# --- Deck Operations ---


async def get_deck(session: AsyncSession, deck_id: int) -> DeckDB | None:
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(selectinload(DeckDB.cards))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_deck(
    session: AsyncSession,
    user_id: str,
    name: str,
    cards: Iterable[tuple[str, int, str]] = (),
    description: str | None = None,
) -> DeckDB:
    """
    Create a deck.

    Args:
        cards: (card_id, quantity, category) rows
    """
    deck = DeckDB(user_id=user_id, name=name, description=description, current_version=0)
    deck.cards = [
        DeckCardDB(card_id=card_id, quantity=quantity, category=category)
        for card_id, quantity, category in cards
    ]
    session.add(deck)
    await session.flush()
    return deck


async def replace_deck_cards(
    session: AsyncSession, deck: DeckDB, cards: Iterable[tuple[str, int, str]]
) -> DeckDB:
    """Replace a deck's card list. Snapshot first to keep history."""
    deck.cards.clear()
    await session.flush()
    for card_id, quantity, category in cards:
        deck.cards.append(DeckCardDB(card_id=card_id, quantity=quantity, category=category))
    await session.flush()
    return deck


async def create_deck_version(
    session: AsyncSession,
    deck: DeckDB,
    change_note: str | None = None,
    version_name: str | None = None,
) -> int:
    """
    Snapshot a deck's current cards as the next version.

    The version is named "Version N" unless version_name is given.

    Returns:
        The new version number, or 0 if the deck has no cards (nothing
        is stored in that case).
    """
    if not deck.cards:
        return 0

    result = await session.execute(
        select(func.max(DeckVersionDB.version)).where(DeckVersionDB.deck_id == deck.id)
    )
    next_version = (result.scalar_one_or_none() or 0) + 1

    session.add(
        DeckVersionDB(
            deck_id=deck.id,
            version=next_version,
            version_name=version_name or f"Version {next_version}",
            change_note=change_note,
            cards=[
                DeckVersionCardDB(
                    card_id=card.card_id,
                    quantity=card.quantity,
                    category=card.category,
                )
                for card in deck.cards
            ],
        )
    )
    deck.current_version = next_version
    await session.flush()

    logger.info(
        "deck_version_created",
        extra={"deck_id": deck.id, "version": next_version, "card_count": len(deck.cards)},
    )
    return next_version


async def list_deck_versions(session: AsyncSession, deck_id: int) -> list[DeckVersionDB]:
    """All versions of a deck, newest first."""
    result = await session.execute(
        select(DeckVersionDB)
        .where(DeckVersionDB.deck_id == deck_id)
        .options(selectinload(DeckVersionDB.cards))
        .order_by(DeckVersionDB.version.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_deck_version(
    session: AsyncSession, deck_id: int, version: int
) -> DeckVersionDB | None:
    result = await session.execute(
        select(DeckVersionDB)
        .where(DeckVersionDB.deck_id == deck_id, DeckVersionDB.version == version)
        .options(selectinload(DeckVersionDB.cards).selectinload(DeckVersionCardDB.card))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def version_to_snapshot(version: DeckVersionDB) -> VersionSnapshot:
    """Convert a stored version (with cards loaded) to a VersionSnapshot."""
    return VersionSnapshot(
        cards=tuple(
            SnapshotCard(
                card_id=row.card_id,
                card=CardDescriptor(
                    name=row.card.name,
                    card_type=row.card.card_type,
                    rarity=row.card.rarity,
                    cost=row.card.cost,
                ),
                quantity=row.quantity,
                category=row.category or DEFAULT_CATEGORY,
            )
            for row in version.cards
        ),
        version=version.version,
        label=version.version_name,
    )


async def count_deck_versions(session: AsyncSession, deck_id: int) -> int:
    result = await session.execute(
        select(func.count(DeckVersionDB.id)).where(DeckVersionDB.deck_id == deck_id)
    )
    return result.scalar_one()


async def restore_deck_version(
    session: AsyncSession, deck: DeckDB, version: DeckVersionDB
) -> int:
    """
    Put a stored version's cards back on the deck.

    The deck's current cards are saved first as a backup version, so a
    restore can itself be undone.

    Returns:
        The backup version number, or 0 if the deck had no cards to back up
    """
    backup = await create_deck_version(
        session,
        deck,
        change_note=f"Automatic backup before restoring to version {version.version}",
        version_name=f"Before restoring to v{version.version}",
    )
    await replace_deck_cards(
        session,
        deck,
        [(row.card_id, row.quantity, row.category or DEFAULT_CATEGORY) for row in version.cards],
    )

    logger.info(
        "deck_version_restored",
        extra={"deck_id": deck.id, "version": version.version, "backup_version": backup},
    )
    return backup


async def delete_deck_version(session: AsyncSession, version: DeckVersionDB) -> None:
    """Delete a stored version and its cards. The deck itself is untouched."""
    deck_id, number = version.deck_id, version.version
    await session.delete(version)
    await session.flush()

    logger.info("deck_version_deleted", extra={"deck_id": deck_id, "version": number})


async def list_deck_holdings(session: AsyncSession, deck_id: int) -> list[Holding]:
    """A deck's cards as exportable holdings, ordered by category then name."""
    result = await session.execute(
        select(DeckCardDB)
        .where(DeckCardDB.deck_id == deck_id)
        .options(selectinload(DeckCardDB.card).selectinload(CatalogCardDB.card_set))
        .execution_options(populate_existing=True)
    )
    rows = sorted(result.scalars().all(), key=lambda r: (r.category, r.card.name))
    return [
        Holding(
            card_id=row.card.id,
            card_name=row.card.name,
            quantity=row.quantity,
            set_name=row.card.card_set.name if row.card.card_set else None,
            set_code=row.card.card_set.code if row.card.card_set else None,
            set_number=row.card.set_number,
            card_type=row.card.card_type,
            rarity=row.card.rarity,
            market_price=row.card.market_price,
        )
        for row in rows
    ]
