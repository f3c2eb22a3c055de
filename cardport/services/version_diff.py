"""
Deck version comparison.

Partitions the union of card ids in two snapshots into added, removed,
modified and unchanged. One dict lookup per card id, so the cost is
linear in the size of both snapshots.
"""

from collections.abc import Iterable

from cardport.models.versions import (
    CardChange,
    ChangeType,
    DiffSummary,
    SnapshotCard,
    VersionSnapshot,
)


def diff_snapshots(a: VersionSnapshot, b: VersionSnapshot) -> list[CardChange]:
    """
    Compare snapshot `a` (older) with snapshot `b` (newer).

    Category comes from `b` when a card is in both, since that reflects
    the current categorization.

    Returns:
        One CardChange per card id in either snapshot, sorted by card name
        then card id
    """
    cards_a = _index(a.cards)
    cards_b = _index(b.cards)

    changes: list[CardChange] = []
    for card_id in cards_a.keys() | cards_b.keys():
        old = cards_a.get(card_id)
        new = cards_b.get(card_id)

        if old is not None and new is not None:
            changes.append(
                CardChange(
                    type=ChangeType.UNCHANGED
                    if old.quantity == new.quantity
                    else ChangeType.MODIFIED,
                    card_id=card_id,
                    card_name=old.card.name,
                    card=old.card,
                    old_quantity=old.quantity,
                    new_quantity=new.quantity,
                    category=new.category,
                )
            )
        elif old is not None:
            changes.append(
                CardChange(
                    type=ChangeType.REMOVED,
                    card_id=card_id,
                    card_name=old.card.name,
                    card=old.card,
                    old_quantity=old.quantity,
                    category=old.category,
                )
            )
        elif new is not None:
            changes.append(
                CardChange(
                    type=ChangeType.ADDED,
                    card_id=card_id,
                    card_name=new.card.name,
                    card=new.card,
                    new_quantity=new.quantity,
                    category=new.category,
                )
            )

    changes.sort(key=lambda change: (change.card_name, change.card_id))
    return changes


def summarize_changes(changes: Iterable[CardChange]) -> DiffSummary:
    """Count changes by type and total the quantity movement."""
    summary = DiffSummary()
    for change in changes:
        if change.type is ChangeType.ADDED:
            summary.added += 1
        elif change.type is ChangeType.REMOVED:
            summary.removed += 1
        elif change.type is ChangeType.MODIFIED:
            summary.modified += 1
        else:
            summary.unchanged += 1
            continue
        summary.net_quantity_change += change.delta
        summary.changed_card_ids.append(change.card_id)
    return summary


def _index(cards: Iterable[SnapshotCard]) -> dict[str, SnapshotCard]:
    """Map card id to snapshot row. A repeated id keeps its last row."""
    return {card.card_id: card for card in cards}
