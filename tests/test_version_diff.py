"""Tests for comparing deck version snapshots."""

from cardport.models.versions import (
    CardChange,
    CardDescriptor,
    ChangeType,
    SnapshotCard,
    VersionSnapshot,
)
from cardport.services.version_diff import diff_snapshots, summarize_changes


def card(card_id: str, name: str, quantity: int, category: str = "main") -> SnapshotCard:
    return SnapshotCard(
        card_id=card_id,
        card=CardDescriptor(name=name, card_type="Unit"),
        quantity=quantity,
        category=category,
    )


def snapshot(*cards: SnapshotCard) -> VersionSnapshot:
    return VersionSnapshot(cards=cards)


def by_id(changes: list[CardChange]) -> dict[str, CardChange]:
    return {c.card_id: c for c in changes}


class TestDiffSnapshots:
    def test_added_and_unchanged_sorted_by_name(self) -> None:
        a = snapshot(card("X", "Zaku II", 2))
        b = snapshot(card("X", "Zaku II", 2), card("Y", "Gouf", 1))

        changes = diff_snapshots(a, b)

        assert [(c.type, c.card_id, c.old_quantity, c.new_quantity) for c in changes] == [
            (ChangeType.ADDED, "Y", None, 1),
            (ChangeType.UNCHANGED, "X", 2, 2),
        ]

    def test_removed_and_modified(self) -> None:
        a = snapshot(card("X", "Zaku II", 2), card("Y", "Gouf", 3))
        b = snapshot(card("X", "Zaku II", 4))

        changes = by_id(diff_snapshots(a, b))

        assert changes["X"].type == ChangeType.MODIFIED
        assert (changes["X"].old_quantity, changes["X"].new_quantity) == (2, 4)
        assert changes["Y"].type == ChangeType.REMOVED
        assert changes["Y"].new_quantity is None

    def test_category_prefers_newer(self) -> None:
        a = snapshot(card("X", "Zaku II", 2, "main"), card("Y", "Gouf", 1, "side"))
        b = snapshot(card("X", "Zaku II", 2, "side"))

        changes = by_id(diff_snapshots(a, b))

        assert changes["X"].category == "side"
        assert changes["Y"].category == "side"

    def test_ties_broken_by_card_id(self) -> None:
        """Two printings with the same name sort by id."""
        a = snapshot()
        b = snapshot(card("p2", "Zaku II", 1), card("p1", "Zaku II", 3))

        assert [c.card_id for c in diff_snapshots(a, b)] == ["p1", "p2"]

    def test_descriptor_carried_through(self) -> None:
        a = snapshot(card("X", "Zaku II", 2))

        change = diff_snapshots(a, snapshot())[0]

        assert change.card.card_type == "Unit"
        assert change.card_name == "Zaku II"

    def test_empty_snapshots(self) -> None:
        assert diff_snapshots(snapshot(), snapshot()) == []

    def test_every_card_appears_once(self) -> None:
        a = snapshot(card("A", "Dom", 1), card("B", "Gouf", 2), card("C", "Zaku II", 3))
        b = snapshot(card("B", "Gouf", 2), card("C", "Zaku II", 1), card("D", "Gelgoog", 1))

        ids = [c.card_id for c in diff_snapshots(a, b)]

        assert sorted(ids) == ["A", "B", "C", "D"]
        assert len(ids) == len(set(ids))

    def test_symmetry(self) -> None:
        """Reversing the arguments swaps added/removed and old/new quantities."""
        a = snapshot(card("A", "Dom", 1), card("B", "Gouf", 2), card("C", "Zaku II", 3))
        b = snapshot(card("B", "Gouf", 2), card("C", "Zaku II", 1), card("D", "Gelgoog", 1))

        forward = by_id(diff_snapshots(a, b))
        backward = by_id(diff_snapshots(b, a))

        assert forward.keys() == backward.keys()
        swapped = {
            ChangeType.ADDED: ChangeType.REMOVED,
            ChangeType.REMOVED: ChangeType.ADDED,
            ChangeType.MODIFIED: ChangeType.MODIFIED,
            ChangeType.UNCHANGED: ChangeType.UNCHANGED,
        }
        for card_id, change in forward.items():
            reverse = backward[card_id]
            assert reverse.type == swapped[change.type]
            assert reverse.old_quantity == change.new_quantity
            assert reverse.new_quantity == change.old_quantity


class TestSummarizeChanges:
    def test_counts_and_net_change(self) -> None:
        a = snapshot(card("A", "Dom", 1), card("B", "Gouf", 2), card("C", "Zaku II", 3))
        b = snapshot(card("B", "Gouf", 2), card("C", "Zaku II", 1), card("D", "Gelgoog", 4))

        summary = summarize_changes(diff_snapshots(a, b))

        assert (summary.added, summary.removed, summary.modified, summary.unchanged) == (
            1,
            1,
            1,
            1,
        )
        # -1 (Dom) -2 (Zaku II) +4 (Gelgoog)
        assert summary.net_quantity_change == 1
        assert sorted(summary.changed_card_ids) == ["A", "C", "D"]
        assert summary.has_changes

    def test_identical_snapshots(self) -> None:
        a = snapshot(card("A", "Dom", 1))

        summary = summarize_changes(diff_snapshots(a, a))

        assert summary.unchanged == 1
        assert not summary.has_changes
        assert summary.net_quantity_change == 0
