import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardport.db.database import get_session
from cardport.db.operations import add_card_set, add_catalog_card
from cardport.main import app
from cardport.models.db import Base, CatalogCardDB


@pytest.fixture
def sample_csv() -> str:
    """Spreadsheet paste with a header row and one bad line."""
    return """Card Name,Quantity,Set Name,Set Number
RX-78-2 Gundam,2,Mobile Suit Gundam,001
"Char's Zaku II",1,GD01,012
Nu Gundam,0
Hyaku Shiki"""


@pytest.fixture
def sample_decklist() -> str:
    return """// Federation aggro
# sideboard notes live here

3 RX-78-2 Gundam
2x Nu Gundam
four Zeta Gundam
1X Hyaku Shiki"""


@pytest.fixture
def sample_mtga_export() -> str:
    return """Deck
4 RX-78-2 Gundam (gd01) 001
2 Nu Gundam (GD01) 045a
1 Hyaku Shiki

Sideboard
2 Char's Zaku II (ST02) 007"""


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def catalog(session: AsyncSession) -> dict[str, CatalogCardDB]:
    """A small committed catalog: two sets, a reprint and a card with no set."""
    gd01 = await add_card_set(session, "Newtype Rising", "GD01")
    st01 = await add_card_set(session, "Heroic Beginnings", "ST01")
    cards = {
        "gundam": await add_catalog_card(
            session,
            "RX-78-2 Gundam",
            card_set=gd01,
            set_number="001",
            card_type="Unit",
            rarity="Rare",
            cost=3,
            market_price=2.5,
            card_id="gd01-001",
        ),
        "zaku_gd01": await add_catalog_card(
            session,
            "Zaku II",
            card_set=gd01,
            set_number="012",
            card_type="Unit",
            rarity="Common",
            cost=2,
            card_id="gd01-012",
        ),
        "zaku_st01": await add_catalog_card(
            session,
            "Zaku II",
            card_set=st01,
            set_number="003",
            card_type="Unit",
            rarity="Common",
            cost=2,
            card_id="st01-003",
        ),
        "white_base": await add_catalog_card(
            session, "White Base", card_type="Base", card_id="promo-wb"
        ),
    }
    await session.commit()
    return cards


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
