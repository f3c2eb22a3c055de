from dataclasses import dataclass
from datetime import datetime
from typing import Literal

ExportFormat = Literal["csv", "json", "decklist", "txt", "mtga", "cockatrice"]

EXPORT_FORMATS: tuple[str, ...] = ("csv", "json", "decklist", "txt", "mtga", "cockatrice")

DEFAULT_CONDITION = "Near Mint"


@dataclass(frozen=True, slots=True)
class ExportOptions:
    """
    Export configuration.

    Flags that do not apply to a format (e.g. include_values for decklist)
    are ignored rather than rejected.
    """

    format: ExportFormat = "json"
    include_metadata: bool = False
    include_conditions: bool = False
    include_values: bool = False
    only_owned: bool = False
    custom_name: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class Holding:
    """
    One held card as exported.

    Built from a collection row joined with its catalog card.
    """

    card_id: str
    card_name: str
    quantity: int
    set_name: str | None = None
    set_code: str | None = None
    set_number: str | None = None
    card_type: str | None = None
    rarity: str | None = None
    condition: str | None = None
    market_price: float | None = None
    added_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_value(self) -> float:
        return (self.market_price or 0.0) * self.quantity
