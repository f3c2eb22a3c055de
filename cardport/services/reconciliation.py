"""
Reconciliation of parsed entries against a user's existing holdings.

INVARIANTS:
1. Entries are resolved one at a time, in input order
2. Every entry lands in exactly one of success/failed/skipped
3. A resolution failure never aborts the batch
4. Oversized batches are rejected before any resolution happens
5. `imported` reports the incoming quantity, not the merged total
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from cardport.models.entries import CardEntry
from cardport.models.failure import BatchTooLargeError
from cardport.models.reconciliation import (
    ImportAction,
    ImportResult,
    ResolvedCard,
    UpdatePolicy,
)

logger = logging.getLogger(__name__)

CardResolver = Callable[[CardEntry], Awaitable[ResolvedCard | None]]


class HoldingsStore(Protocol):
    """Persistence boundary for one user's holdings, keyed by card id."""

    async def get(self, card_id: str) -> int | None: ...

    async def upsert(self, card_id: str, quantity: int) -> None: ...


class InMemoryHoldings:
    """Dict-backed HoldingsStore, for previews and tests."""

    def __init__(self, quantities: dict[str, int] | None = None) -> None:
        self.quantities: dict[str, int] = dict(quantities or {})

    async def get(self, card_id: str) -> int | None:
        return self.quantities.get(card_id)

    async def upsert(self, card_id: str, quantity: int) -> None:
        self.quantities[card_id] = quantity


def check_batch_size(entries: Sequence[CardEntry], batch_limit: int) -> None:
    """
    Reject a batch larger than `batch_limit` entries, wholesale.

    Raises:
        BatchTooLargeError: If len(entries) > batch_limit
    """
    if len(entries) > batch_limit:
        raise BatchTooLargeError(size=len(entries), limit=batch_limit)


def merged_quantity(existing: int, incoming: int, policy: UpdatePolicy) -> int:
    """New stored quantity for an existing holding under ADD or REPLACE."""
    if policy is UpdatePolicy.REPLACE:
        return incoming
    if policy is UpdatePolicy.ADD:
        return existing + incoming
    raise ValueError(f"Policy {policy.value!r} does not produce a quantity")


async def reconcile(
    entries: Sequence[CardEntry],
    resolve_card: CardResolver,
    holdings: HoldingsStore,
    policy: UpdatePolicy = UpdatePolicy.ADD,
    batch_limit: int | None = None,
) -> ImportResult:
    """
    Apply parsed entries to holdings under an update policy.

    Args:
        entries: Parsed entries, in input order
        resolve_card: Async catalog lookup; None means "not found"
        holdings: Store for the user's current quantities
        policy: How to combine with an existing holding
        batch_limit: If given, reject larger batches before starting

    Returns:
        ImportResult with per-entry outcomes in input order

    Raises:
        BatchTooLargeError: If batch_limit is given and exceeded
    """
    if batch_limit is not None:
        check_batch_size(entries, batch_limit)

    result = ImportResult()

    for entry in entries:
        try:
            await _apply_entry(entry, resolve_card, holdings, policy, result)
        except Exception as e:
            logger.warning(
                "card_import_failed",
                extra={
                    "line": entry.source_line,
                    "card_name": entry.card_name,
                    "error_type": type(e).__name__,
                },
            )
            result.record_failure(
                f"Line {entry.source_line}: Failed to process {entry.card_name}: {e}"
            )

    logger.info(
        "reconciliation_complete",
        extra={
            "policy": policy.value,
            "entry_count": len(entries),
            "success_count": result.success_count,
            "failed_count": result.failed_count,
            "skipped_count": result.skipped_count,
        },
    )

    return result


async def _apply_entry(
    entry: CardEntry,
    resolve_card: CardResolver,
    holdings: HoldingsStore,
    policy: UpdatePolicy,
    result: ImportResult,
) -> None:
    """Resolve and apply one entry. Outcomes are recorded only once applied."""
    card = await resolve_card(entry)
    if card is None:
        result.record_failure(f"Line {entry.source_line}: Card not found: {entry.card_name}")
        return

    existing = await holdings.get(card.card_id)

    if existing is None:
        await holdings.upsert(card.card_id, entry.quantity)
        result.record_success(card.card_name, entry.quantity, ImportAction.ADDED)
        return

    if policy is UpdatePolicy.SKIP:
        result.record_skip()
        return

    await holdings.upsert(card.card_id, merged_quantity(existing, entry.quantity, policy))
    result.record_success(card.card_name, entry.quantity, ImportAction.UPDATED)
