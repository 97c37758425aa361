"""
Shared fixtures: a throwaway SQLite database per test and a seeded store.

The database lives in a file under tmp_path with NullPool so the dashboard
fan-out threads each get their own connection.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

import backoffice.models  # noqa: F401
from backoffice.models.base import Base
from backoffice.models.commerce import Customer, Product, Order, OrderItem
from backoffice.models.marketing import Campaign, Promotion, EmailCampaign, SocialMediaPost
from backoffice.models.finance import Invoice, Expense

# Fixed clock for tests that pass `now` explicitly
NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'analytics.db'}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def reports_dir(tmp_path):
    return str(tmp_path / "reports")


@pytest.fixture
def seed_store(session_factory):
    """
    Seed a small store relative to `now`.

    Last 7 days: three orders (30 + 50 + 70 = 150), two new customers, one
    customer with two orders. One older order (200) sits outside the week.
    Last month: 1000 paid, 300 pending, 200 overdue, 500 of expenses.
    """
    def _seed(now: datetime = NOW):
        db = session_factory()
        try:
            widget = Product(name="Widget", sku="W-1", category="tools", price=10.0, stock=5)
            gadget = Product(name="Gadget", sku="G-1", category="toys", price=20.0, stock=0)
            gizmo = Product(name="Gizmo", sku="Z-1", category="tools", price=5.0, stock=50)
            db.add_all([widget, gadget, gizmo])

            alice = Customer(name="Alice", email="alice@example.com", location="NYC", created_at=now - timedelta(days=60))
            bob = Customer(name="Bob", email="bob@example.com", location="LA", created_at=now - timedelta(days=2))
            cara = Customer(name="Cara", email="cara@example.com", location="NYC", created_at=now - timedelta(days=3))
            db.add_all([alice, bob, cara])
            db.flush()

            o1 = Order(customer_id=alice.id, status="delivered", total=30.0, created_at=now - timedelta(days=1))
            o2 = Order(customer_id=alice.id, status="delivered", total=50.0, created_at=now - timedelta(days=2))
            o3 = Order(customer_id=bob.id, status="shipped", total=70.0, created_at=now - timedelta(days=3))
            o4 = Order(customer_id=cara.id, status="delivered", total=200.0, created_at=now - timedelta(days=20))
            db.add_all([o1, o2, o3, o4])
            db.flush()

            db.add_all([
                OrderItem(order_id=o1.id, product_id=widget.id, quantity=3, price=10.0, total=30.0),
                OrderItem(order_id=o2.id, product_id=gadget.id, quantity=1, price=20.0, total=20.0),
                OrderItem(order_id=o2.id, product_id=gizmo.id, quantity=6, price=5.0, total=30.0),
                OrderItem(order_id=o3.id, product_id=widget.id, quantity=7, price=10.0, total=70.0),
                OrderItem(order_id=o4.id, product_id=gizmo.id, quantity=40, price=5.0, total=200.0),
            ])

            db.add_all([
                Campaign(name="Spring launch", status="ACTIVE", budget=1000.0, channels=["email", "social"],
                         created_at=now - timedelta(days=1)),
                Campaign(name="Summer teaser", status="DRAFT", created_at=now - timedelta(days=2)),
                Promotion(name="Welcome", code="WELCOME10", type="percentage", value=10.0, usage_count=5,
                          created_at=now - timedelta(days=1)),
                Promotion(name="Bulk", code="BULK5", type="fixed", value=5.0, usage_count=7,
                          created_at=now - timedelta(days=4)),
                EmailCampaign(name="Newsletter", subject="News", status="SENT", sent_count=200, open_count=50,
                              click_count=10, sent_at=now - timedelta(days=2), created_at=now - timedelta(days=2)),
                SocialMediaPost(content="New arrivals", platforms=["instagram"], status="PUBLISHED",
                                published_at=now - timedelta(days=1), created_at=now - timedelta(days=1)),
            ])

            db.add_all([
                Invoice(number="INV-1", customer_id=alice.id, amount=1000.0, status="paid",
                        date=now - timedelta(days=2), due_date=now + timedelta(days=28)),
                Invoice(number="INV-2", customer_id=bob.id, amount=500.0, status="paid",
                        date=now - timedelta(days=45), due_date=now - timedelta(days=15)),
                Invoice(number="INV-3", customer_id=bob.id, amount=300.0, status="pending",
                        date=now - timedelta(days=5), due_date=now + timedelta(days=10)),
                Invoice(number="INV-4", customer_id=cara.id, amount=200.0, status="overdue",
                        date=now - timedelta(days=10), due_date=now - timedelta(days=1)),
                Expense(category="rent", description="March rent", amount=400.0, date=now - timedelta(days=3)),
                Expense(category="ads", description="Paid social", amount=100.0, date=now - timedelta(days=4)),
                Expense(category="rent", description="January rent", amount=999.0, date=now - timedelta(days=60)),
            ])
            db.commit()
        finally:
            db.close()
        return now

    return _seed
