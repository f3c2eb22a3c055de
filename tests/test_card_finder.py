"""Tests for resolving parsed entries against the catalog."""

from sqlalchemy.ext.asyncio import AsyncSession

from cardport.models.db import CatalogCardDB
from cardport.models.entries import CardEntry
from cardport.models.reconciliation import ResolvedCard
from cardport.services.card_finder import CatalogCardResolver


def entry(name: str, **kwargs: str) -> CardEntry:
    return CardEntry(source_line=1, card_name=name, quantity=1, **kwargs)


class TestCatalogCardResolver:
    async def test_by_card_id(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        resolved = await resolver(entry("whatever", card_id="st01-003"))

        assert resolved == ResolvedCard(card_id="st01-003", card_name="Zaku II")

    async def test_unknown_card_id_does_not_fall_back(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        """An explicit id that misses is a miss, even if the name exists."""
        resolver = CatalogCardResolver(session)

        assert await resolver(entry("Zaku II", card_id="nope")) is None

    async def test_by_set_code_and_number(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        resolved = await resolver(entry("Zaku II", set_name="st01", set_number="003"))

        assert resolved is not None
        assert resolved.card_id == "st01-003"

    async def test_by_set_name_and_number(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        resolved = await resolver(
            entry("Gundam", set_name="Newtype Rising", set_number="001")
        )

        assert resolved == ResolvedCard(card_id="gd01-001", card_name="RX-78-2 Gundam")

    async def test_known_set_wrong_number_is_miss(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        assert await resolver(entry("Zaku II", set_name="GD01", set_number="999")) is None

    async def test_unknown_set_falls_back_to_name(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        resolved = await resolver(entry("White Base", set_name="Promo", set_number="1"))

        assert resolved is not None
        assert resolved.card_id == "promo-wb"

    async def test_by_name_case_insensitive(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        resolved = await resolver(entry("rx-78-2 GUNDAM"))

        assert resolved is not None
        assert resolved.card_name == "RX-78-2 Gundam"

    async def test_reprint_resolves_to_lowest_id(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        resolved = await resolver(entry("Zaku II"))

        assert resolved is not None
        assert resolved.card_id == "gd01-012"

    async def test_not_found(
        self, session: AsyncSession, catalog: dict[str, CatalogCardDB]
    ) -> None:
        resolver = CatalogCardResolver(session)

        assert await resolver(entry("Psycho Gundam")) is None
