"""
Deck version snapshot and change models.

A VersionSnapshot is one persisted version of a deck. Comparing two
snapshots yields one CardChange per card id present in either.
"""

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_CATEGORY = "main"


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class CardDescriptor:
    """Display data for a card, carried through the diff untouched."""

    name: str
    card_type: str | None = None
    rarity: str | None = None
    cost: int | None = None


@dataclass(frozen=True, slots=True)
class SnapshotCard:
    card_id: str
    card: CardDescriptor
    quantity: int
    category: str = DEFAULT_CATEGORY


@dataclass(frozen=True, slots=True)
class VersionSnapshot:
    """
    Ordered card list for one deck version.

    Attributes:
        cards: Cards in stored order
        version: Version number, if the snapshot was persisted
        label: Human label (e.g. "Version 3")
    """

    cards: tuple[SnapshotCard, ...] = ()
    version: int | None = None
    label: str | None = None


@dataclass(frozen=True, slots=True)
class CardChange:
    """
    How one card differs between two snapshots.

    Quantity presence by type:
        added     - new_quantity only
        removed   - old_quantity only
        modified  - both, unequal
        unchanged - both, equal
    """

    type: ChangeType
    card_id: str
    card_name: str
    card: CardDescriptor
    old_quantity: int | None = None
    new_quantity: int | None = None
    category: str = DEFAULT_CATEGORY

    @property
    def delta(self) -> int:
        """Quantity change, treating an absent side as zero."""
        return (self.new_quantity or 0) - (self.old_quantity or 0)


@dataclass
class DiffSummary:
    """Per-type counts for a list of changes."""

    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0
    net_quantity_change: int = 0
    changed_card_ids: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)
