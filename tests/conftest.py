"""Pytest fixtures for testing"""

import pytest
from typing import Any, Dict, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from bagayi_gateway.api.main import create_app
from bagayi_gateway.api.dependencies import get_directory_client, get_payment_events_client
from bagayi_gateway.infrastructure.database.models import Base
from bagayi_gateway.infrastructure.database.session import get_db
from bagayi_gateway.domain.directory import DirectorySnapshot
from bagayi_gateway.domain.models import Account, Category


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

EXTERNAL_ACCOUNT_ID = "account:external"
USER_ID = "user:alice"


@pytest.fixture
def directory() -> DirectorySnapshot:
    """
    Sample directory:
    - household (unlinked root) with child groceries
    - shop (linked root, main + B2C paybill)
    - rent (linked root, main paybill only)
    - savings (unlinked root)
    - external settlement account outside the tree
    """
    categories = [
        Category(id="category:household", name="Household", default_account_id="account:household_main"),
        Category(id="category:groceries", name="Groceries", parent_id="category:household"),
        Category(
            id="category:shop",
            name="Shop",
            is_linked=True,
            default_account_id="account:shop_float",
            payment_integration_id="mpesa:shop_main",
            has_b2c_paybill=True,
            b2c_paybill_id="mpesa:shop_b2c",
        ),
        Category(
            id="category:rent",
            name="Rent",
            is_linked=True,
            default_account_id="account:rent_main",
            payment_integration_id="mpesa:rent_paybill",
        ),
        Category(id="category:savings", name="Savings", default_account_id="account:savings_main"),
    ]
    accounts = [
        Account(id="account:household_main", name="Household Main", category_id="category:household"),
        Account(id="account:household_misc", name="Household Misc", category_id="category:household"),
        Account(id="account:groceries_wallet", name="Groceries Wallet", category_id="category:groceries"),
        Account(id="account:shop_float", name="Shop Float", category_id="category:shop"),
        Account(id="account:shop_till", name="Shop Till", category_id="category:shop"),
        Account(id="account:rent_main", name="Rent Main", category_id="category:rent"),
        Account(id="account:savings_main", name="Savings Main", category_id="category:savings"),
        Account(id="account:savings_goal", name="Savings Goal", category_id="category:savings"),
    ]
    return DirectorySnapshot.build(accounts, categories, external_account_id=EXTERNAL_ACCOUNT_ID)


class StubDirectoryClient:
    """Directory client returning a fixed snapshot"""

    def __init__(self, snapshot: DirectorySnapshot):
        self.snapshot = snapshot
        self.calls: List[str] = []

    async def get_snapshot(self, user_id: str) -> DirectorySnapshot:
        self.calls.append(user_id)
        return self.snapshot


class RecordingEventsClient:
    """Payment events client that records payloads instead of posting them"""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def send_transfer_event(self, payload: Dict[str, Any]) -> None:
        self.events.append(payload)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def directory_client(directory: DirectorySnapshot) -> StubDirectoryClient:
    return StubDirectoryClient(directory)


@pytest.fixture
def events_client() -> RecordingEventsClient:
    return RecordingEventsClient()


@pytest.fixture
def client(
    db: Session,
    directory_client: StubDirectoryClient,
    events_client: RecordingEventsClient,
) -> TestClient:
    """Create FastAPI test client with test database and stubbed collaborators"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_directory_client] = lambda: directory_client
    app.dependency_overrides[get_payment_events_client] = lambda: events_client
    return TestClient(app, headers={"X-User-Id": USER_ID})
