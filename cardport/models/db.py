"""
SQLAlchemy ORM models for persistent storage.

The catalog (sets and cards) is read-only from the import pipeline's point
of view. Collections, decks and deck versions are written by it.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# --- Catalog ---


class CardSetDB(Base):
    """A card set (expansion), matched on import by name or code."""

    __tablename__ = "card_sets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, index=True)

    cards: Mapped[list["CatalogCardDB"]] = relationship(back_populates="card_set")

    def __repr__(self) -> str:
        return f"<CardSetDB(code={self.code}, name={self.name})>"


class CatalogCardDB(Base):
    """One printing in the card catalog."""

    __tablename__ = "catalog_cards"
    __table_args__ = (UniqueConstraint("set_id", "set_number", name="uq_set_number"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    set_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("card_sets.id"), nullable=True, index=True
    )
    set_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    card_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    rarity: Mapped[str | None] = mapped_column(String(32), nullable=True)
    cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    market_price: Mapped[float | None] = mapped_column(Float, nullable=True)

    card_set: Mapped[CardSetDB | None] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CatalogCardDB(id={self.id}, name={self.name})>"


# --- Collections ---


class UserCollectionDB(Base):
    """
    A user's card collection stored in the database.

    Each user has one collection containing their held cards.
    """

    __tablename__ = "user_collections"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    cards: Mapped[list["CollectionCardDB"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<UserCollectionDB(id={self.id}, user_id={self.user_id})>"


class CollectionCardDB(Base):
    """How many copies of one catalog card a collection holds."""

    __tablename__ = "collection_cards"
    __table_args__ = (UniqueConstraint("collection_id", "card_id", name="uq_collection_card"),)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_collections.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("catalog_cards.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    condition: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    collection: Mapped["UserCollectionDB"] = relationship(back_populates="cards")
    card: Mapped[CatalogCardDB] = relationship()

    def __repr__(self) -> str:
        return f"<CollectionCardDB(card_id={self.card_id}, qty={self.quantity})>"


# --- Decks and versions ---


class DeckDB(Base):
    """A user's deck. `current_version` is the latest snapshot number."""

    __tablename__ = "decks"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_version: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )
    versions: Mapped[list["DeckVersionDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class DeckCardDB(Base):
    __tablename__ = "deck_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("catalog_cards.id"))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    category: Mapped[str] = mapped_column(String(32), default="main")

    deck: Mapped[DeckDB] = relationship(back_populates="cards")
    card: Mapped[CatalogCardDB] = relationship()


class DeckVersionDB(Base):
    """An immutable snapshot of a deck's cards."""

    __tablename__ = "deck_versions"
    __table_args__ = (UniqueConstraint("deck_id", "version", name="uq_deck_version"),)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    version: Mapped[int] = mapped_column(Integer)
    version_name: Mapped[str] = mapped_column(String(255))
    change_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    deck: Mapped[DeckDB] = relationship(back_populates="versions")
    cards: Mapped[list["DeckVersionCardDB"]] = relationship(
        back_populates="version", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckVersionDB(deck_id={self.deck_id}, version={self.version})>"


class DeckVersionCardDB(Base):
    __tablename__ = "deck_version_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("deck_versions.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("catalog_cards.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    category: Mapped[str] = mapped_column(String(32), default="main")

    version: Mapped[DeckVersionDB] = relationship(back_populates="cards")
    card: Mapped[CatalogCardDB] = relationship()
