from dataclasses import dataclass, field
from enum import Enum


class UpdatePolicy(str, Enum):
    """How an incoming quantity combines with a card the user already holds."""

    ADD = "add"
    REPLACE = "replace"
    SKIP = "skip"


class ImportAction(str, Enum):
    ADDED = "added"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """
    A catalog card an entry resolved to.

    Attributes:
        card_id: Catalog identity (the holdings key)
        card_name: Canonical catalog name
    """

    card_id: str
    card_name: str


@dataclass(frozen=True, slots=True)
class ImportedCard:
    """One successfully applied entry. Quantity is the incoming quantity."""

    card_name: str
    quantity: int
    action: ImportAction


@dataclass
class ImportResult:
    """
    Outcome of reconciling a batch of entries.

    Partial success is the normal case. Every entry that reaches
    reconciliation lands in exactly one of the three counters.
    """

    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    errors: list[str] = field(default_factory=list)
    imported: list[ImportedCard] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return self.success_count + self.failed_count + self.skipped_count

    def record_failure(self, reason: str) -> None:
        self.failed_count += 1
        self.errors.append(reason)

    def record_skip(self) -> None:
        self.skipped_count += 1

    def record_success(self, card_name: str, quantity: int, action: ImportAction) -> None:
        self.success_count += 1
        self.imported.append(ImportedCard(card_name=card_name, quantity=quantity, action=action))
