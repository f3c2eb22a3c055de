"""Tests for reconciling parsed entries into holdings."""

import pytest

from cardport.models.entries import CardEntry
from cardport.models.failure import BatchTooLargeError, FailureKind
from cardport.models.reconciliation import (
    ImportAction,
    ImportedCard,
    ResolvedCard,
    UpdatePolicy,
)
from cardport.services.reconciliation import (
    InMemoryHoldings,
    check_batch_size,
    merged_quantity,
    reconcile,
)

CATALOG = {
    "zaku ii": ResolvedCard(card_id="X", card_name="Zaku II"),
    "gouf": ResolvedCard(card_id="G", card_name="Gouf"),
    "dom": ResolvedCard(card_id="D", card_name="Dom"),
}


async def resolve_by_name(entry: CardEntry) -> ResolvedCard | None:
    return CATALOG.get(entry.card_name.lower())


def entry(line: int, name: str, quantity: int) -> CardEntry:
    return CardEntry(source_line=line, card_name=name, quantity=quantity)


class TestMergedQuantity:
    def test_add(self) -> None:
        assert merged_quantity(3, 2, UpdatePolicy.ADD) == 5

    def test_replace(self) -> None:
        assert merged_quantity(3, 2, UpdatePolicy.REPLACE) == 2

    def test_skip_has_no_quantity(self) -> None:
        with pytest.raises(ValueError):
            merged_quantity(3, 2, UpdatePolicy.SKIP)


class TestReconcile:
    async def test_add_policy_merges(self) -> None:
        """Existing 3 + incoming 2 stores 5 but reports the incoming 2."""
        holdings = InMemoryHoldings({"X": 3})

        result = await reconcile([entry(1, "Zaku II", 2)], resolve_by_name, holdings)

        assert holdings.quantities["X"] == 5
        assert result.success_count == 1
        assert result.imported == [
            ImportedCard(card_name="Zaku II", quantity=2, action=ImportAction.UPDATED)
        ]

    async def test_replace_policy_overwrites(self) -> None:
        holdings = InMemoryHoldings({"X": 3})

        result = await reconcile(
            [entry(1, "Zaku II", 2)], resolve_by_name, holdings, UpdatePolicy.REPLACE
        )

        assert holdings.quantities["X"] == 2
        assert result.imported[0].action == ImportAction.UPDATED

    async def test_skip_policy_leaves_existing(self) -> None:
        holdings = InMemoryHoldings({"X": 3})

        result = await reconcile(
            [entry(1, "Zaku II", 2), entry(2, "Gouf", 1)],
            resolve_by_name,
            holdings,
            UpdatePolicy.SKIP,
        )

        assert holdings.quantities == {"X": 3, "G": 1}
        assert result.skipped_count == 1
        assert result.success_count == 1
        assert result.imported == [
            ImportedCard(card_name="Gouf", quantity=1, action=ImportAction.ADDED)
        ]

    async def test_new_card_added(self) -> None:
        holdings = InMemoryHoldings()

        result = await reconcile([entry(1, "dom", 4)], resolve_by_name, holdings)

        assert holdings.quantities == {"D": 4}
        # Canonical catalog name, not the name as typed
        assert result.imported[0].card_name == "Dom"
        assert result.imported[0].action == ImportAction.ADDED

    async def test_unresolved_card_does_not_abort(self) -> None:
        holdings = InMemoryHoldings()

        result = await reconcile(
            [entry(1, "Gundam Zero", 1), entry(2, "Gouf", 1)],
            resolve_by_name,
            holdings,
        )

        assert result.failed_count == 1
        assert result.success_count == 1
        assert result.errors == ["Line 1: Card not found: Gundam Zero"]

    async def test_resolver_exception_counted_as_failure(self) -> None:
        async def flaky(e: CardEntry) -> ResolvedCard | None:
            if e.card_name == "Gouf":
                raise ConnectionError("catalog unavailable")
            return await resolve_by_name(e)

        holdings = InMemoryHoldings()

        result = await reconcile(
            [entry(1, "Gouf", 1), entry(2, "Dom", 1)], flaky, holdings
        )

        assert result.failed_count == 1
        assert result.success_count == 1
        assert result.errors == ["Line 1: Failed to process Gouf: catalog unavailable"]
        assert holdings.quantities == {"D": 1}

    async def test_duplicate_entries_accumulate(self) -> None:
        """A card repeated in one batch is added then updated."""
        holdings = InMemoryHoldings()

        result = await reconcile(
            [entry(1, "Gouf", 1), entry(2, "Gouf", 2)], resolve_by_name, holdings
        )

        assert holdings.quantities == {"G": 3}
        assert [c.action for c in result.imported] == [ImportAction.ADDED, ImportAction.UPDATED]

    async def test_outcomes_in_input_order(self) -> None:
        holdings = InMemoryHoldings()

        result = await reconcile(
            [entry(1, "Dom", 1), entry(2, "Nope", 1), entry(3, "Gouf", 1), entry(4, "Nah", 1)],
            resolve_by_name,
            holdings,
        )

        assert [c.card_name for c in result.imported] == ["Dom", "Gouf"]
        assert [e.split(":")[0] for e in result.errors] == ["Line 2", "Line 4"]

    @pytest.mark.parametrize("policy", list(UpdatePolicy))
    async def test_counts_are_conserved(self, policy: UpdatePolicy) -> None:
        entries = [
            entry(1, "Zaku II", 1),
            entry(2, "Gouf", 2),
            entry(3, "Unknown", 1),
            entry(4, "Dom", 1),
            entry(5, "Zaku II", 1),
        ]
        holdings = InMemoryHoldings({"X": 1, "D": 2})

        result = await reconcile(entries, resolve_by_name, holdings, policy)

        assert result.total_processed == len(entries)
        assert (
            result.success_count + result.failed_count + result.skipped_count == len(entries)
        )

    async def test_empty_batch(self) -> None:
        result = await reconcile([], resolve_by_name, InMemoryHoldings())

        assert result.total_processed == 0
        assert result.imported == []


class TestBatchLimit:
    def test_within_limit(self) -> None:
        check_batch_size([entry(1, "Zaku II", 1)], batch_limit=1)

    def test_over_limit_rejected(self) -> None:
        with pytest.raises(BatchTooLargeError) as exc_info:
            check_batch_size([entry(i, "Zaku II", 1) for i in range(1, 4)], batch_limit=2)

        assert exc_info.value.kind == FailureKind.BATCH_TOO_LARGE
        assert exc_info.value.message == "Import limited to 2 cards at once"

    async def test_rejected_before_any_resolution(self) -> None:
        calls: list[str] = []

        async def tracking(e: CardEntry) -> ResolvedCard | None:
            calls.append(e.card_name)
            return await resolve_by_name(e)

        holdings = InMemoryHoldings()

        with pytest.raises(BatchTooLargeError):
            await reconcile(
                [entry(1, "Gouf", 1), entry(2, "Dom", 1)],
                tracking,
                holdings,
                batch_limit=1,
            )

        assert calls == []
        assert holdings.quantities == {}
