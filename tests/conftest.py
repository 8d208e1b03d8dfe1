"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from typing import Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_tracker.api.main import create_app
from finance_tracker.api.dependencies import get_now
from finance_tracker.infrastructure.database.models import Base
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.domain.models import Card, CategoryRule, PerformanceTier, Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Pinned clock: with the default start day (25) this falls in [2024-03-25, 2024-04-25)
FIXED_NOW = datetime(2024, 4, 20, 12, 0)


def make_transaction(
    txn_id: str,
    when: datetime,
    merchant: str,
    amount: int,
    card_id: str = "card_main",
) -> Transaction:
    return Transaction(id=txn_id, date=when, merchant=merchant, amount=amount, card_id=card_id)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    return TestClient(app)


@pytest.fixture
def sample_rules() -> List[CategoryRule]:
    """Rule list in priority order"""
    return [
        CategoryRule(id="r_netflix", pattern="netflix", category_id="cat_fixed", sub_category_id="sub_etc"),
        CategoryRule(id="r_coffee", pattern="starbucks|coffee", category_id="cat_food", sub_category_id="sub_dining"),
        CategoryRule(id="r_mart", pattern="^e-?mart", category_id="cat_food", sub_category_id="sub_groceries"),
        CategoryRule(id="r_taxi", pattern="taxi", category_id="cat_transport", sub_category_id="sub_taxi"),
    ]


@pytest.fixture
def sample_cards() -> List[Card]:
    return [
        Card(
            id="card_main",
            name="Main Card",
            credit_limit=1_000_000,
            due_day=14,
            performance_tiers=[
                PerformanceTier(amount=600_000, benefit="15,000 cashback"),
                PerformanceTier(amount=300_000, benefit="10,000 cashback"),
            ],
        ),
        Card(id="card_sub", name="Sub Card", credit_limit=0, due_day=1),
    ]


@pytest.fixture
def sample_transactions() -> List[Transaction]:
    """Three months of history; the last block falls in the period [2024-03-25, 2024-04-25)"""
    return [
        # Netflix: same amount every month -> fixed recurring
        make_transaction("n1", datetime(2024, 1, 27, 9, 0), "Netflix", -17_000),
        make_transaction("n2", datetime(2024, 2, 27, 9, 0), "Netflix", -17_000),
        make_transaction("n3", datetime(2024, 3, 27, 9, 0), "Netflix", -17_000),
        # Phone bill: varies -> variable recurring, not yet paid this period
        make_transaction("p1", datetime(2024, 1, 10, 10, 0), "Phone Co", -50_000),
        make_transaction("p2", datetime(2024, 2, 10, 10, 0), "Phone Co", -55_000),
        make_transaction("p3", datetime(2024, 3, 10, 10, 0), "Phone Co", -60_000),
        # In-period everyday spending
        make_transaction("c1", datetime(2024, 4, 1, 8, 30), "Starbucks Gangnam", -6_000),
        make_transaction("m1", datetime(2024, 4, 6, 19, 0), "E-Mart", -120_000),
        make_transaction("t1", datetime(2024, 4, 6, 23, 30), "Kakao Taxi", -25_000, card_id="card_sub"),
        make_transaction("u1", datetime(2024, 4, 10, 13, 0), "Unknown Shop", -400_000),
        # Income is never counted as spending
        make_transaction("s1", datetime(2024, 4, 10, 9, 0), "Salary", 2_500_000),
    ]
