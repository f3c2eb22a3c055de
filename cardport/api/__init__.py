from cardport.api.collection import router as collection_router
from cardport.api.decks import router as decks_router
from cardport.api.health import router as health_router

__all__ = [
    "collection_router",
    "decks_router",
    "health_router",
]
