"""
Shared fixtures: a fresh SQLite database per test and an API client wired to it.
"""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from marketplace.core.config import Settings, get_settings
from marketplace.core.database import Base, build_engine, get_db, init_db
from marketplace.core.security import TokenPayload, create_access_token, hash_password
from marketplace.main import app
from marketplace.models.category import Category
from marketplace.models.listing import Listing
from marketplace.models.message import Message
from marketplace.models.user import User

TEST_SECRET = "test-jwt-secret-12345"
TEST_PASSWORD = "Sup3r!Secret"
T0 = datetime(2025, 1, 15, 10, 0, 0)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Override settings for testing."""
    return Settings(
        jwt_secret=TEST_SECRET,
        database_url=f"sqlite:///{tmp_path / 'test_marketplace.db'}",
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_bytes=1024,
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings.database_url)
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
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
def client(session_factory, settings):
    """Test client whose requests use the test database and settings."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db, settings):
    counter = {"n": 0}

    def _make(username=None, verified=True, password=TEST_PASSWORD, **fields) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            email=fields.pop("email", f"{username}@example.com"),
            username=username,
            password_hash=hash_password(password, settings),
            email_verified=verified,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user: User) -> dict:
        token = create_access_token(TokenPayload(user.id, user.email, user.username), settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def category(db) -> Category:
    category = Category(name="Electronics", slug="electronics", description="Gadgets")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_listing(db, category):
    def _make(seller: User, minutes: int = 0, **fields) -> Listing:
        values = dict(
            title="Used camera",
            description="A good camera",
            price=100.0,
            listing_type="item",
            pricing_type=None,
            images=["https://img.example.com/1.jpg"],
            location="Berlin",
            status="active",
            category_id=category.id,
            created_at=T0 + timedelta(minutes=minutes),
        )
        values.update(fields)
        listing = Listing(seller_id=seller.id, **values)
        db.add(listing)
        db.commit()
        db.refresh(listing)
        return listing

    return _make


@pytest.fixture
def make_message(db):
    """Insert a message at ``T0 + minutes`` so tests control the ordering."""

    def _make(sender: User, receiver: User, content: str, minutes: int = 0, read: bool = False, **fields) -> Message:
        message = Message(
            sender_id=sender.id,
            receiver_id=receiver.id,
            content=content,
            read=read,
            created_at=T0 + timedelta(minutes=minutes),
            **fields,
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    return _make
