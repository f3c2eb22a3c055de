"""
Catalog card resolution for imports.

Maps a parsed CardEntry to a concrete catalog card. Matching precedence:

1. Explicit card id, if the entry has one
2. Set number within a set matched by name or code, if both are present
3. Exact card name, case-insensitive

An explicit id that does not exist is a miss; it does not fall back to
name matching. Likewise a known set with no card at that number is a miss.
An unknown set falls through to name matching.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from cardport.db.operations import (
    find_card_by_name,
    find_card_by_set_number,
    find_card_set,
    get_catalog_card,
)
from cardport.models.db import CatalogCardDB
from cardport.models.entries import CardEntry
from cardport.models.reconciliation import ResolvedCard


class CatalogCardResolver:
    """
    Resolves CardEntry -> ResolvedCard against the catalog tables.

    Instances are callable, so they can be passed straight to reconcile().
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def __call__(self, entry: CardEntry) -> ResolvedCard | None:
        card = await self._find(entry)
        if card is None:
            return None
        return ResolvedCard(card_id=card.id, card_name=card.name)

    async def _find(self, entry: CardEntry) -> CatalogCardDB | None:
        if entry.card_id:
            return await get_catalog_card(self._session, entry.card_id)

        if entry.set_number and entry.set_name:
            card_set = await find_card_set(self._session, entry.set_name)
            if card_set is not None:
                return await find_card_by_set_number(
                    self._session, card_set.id, entry.set_number
                )

        return await find_card_by_name(self._session, entry.card_name)
