from cardport.db.database import get_session, init_db
from cardport.db.operations import (
    CollectionHoldings,
    add_card_set,
    add_catalog_card,
    collection_card_to_holding,
    count_deck_versions,
    create_collection,
    create_deck,
    create_deck_version,
    delete_deck_version,
    find_card_by_name,
    find_card_by_set_number,
    find_card_set,
    get_catalog_card,
    get_collection,
    get_deck,
    get_deck_version,
    get_or_create_collection,
    list_deck_holdings,
    list_deck_versions,
    list_holdings,
    replace_deck_cards,
    restore_deck_version,
    version_to_snapshot,
)

__all__ = [
    "CollectionHoldings",
    "add_card_set",
    "add_catalog_card",
    "collection_card_to_holding",
    "count_deck_versions",
    "create_collection",
    "create_deck",
    "create_deck_version",
    "delete_deck_version",
    "find_card_by_name",
    "find_card_by_set_number",
    "find_card_set",
    "get_catalog_card",
    "get_collection",
    "get_deck",
    "get_deck_version",
    "get_or_create_collection",
    "get_session",
    "init_db",
    "list_deck_holdings",
    "list_deck_versions",
    "list_holdings",
    "replace_deck_cards",
    "restore_deck_version",
    "version_to_snapshot",
]
