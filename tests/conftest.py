"""
Shared pytest fixtures for BookCircle tests.

This module provides:
- A fresh in-memory SQLite database per test (aiosqlite, all tables created)
- An httpx client wired to the FastAPI app with get_db overridden
- Factories for users, books, recommendations and reviews
"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import Book, BookRecommendation, Review, User


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    """HTTP client against the app, each request using its own session."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(db):
    async def _make(username: str | None = None, **kwargs) -> User:
        username = username or f"reader_{uuid.uuid4().hex[:8]}"
        user = User(
            username=username,
            email=kwargs.pop("email", f"{username}@example.com"),
            password_hash=kwargs.pop("password_hash", "not-a-real-hash"),
            display_name=kwargs.pop("display_name", username.title()),
            **kwargs,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_recommendation(db):
    async def _make(user: User, title: str = "The Left Hand of Darkness", **kwargs) -> BookRecommendation:
        rec = BookRecommendation(
            user_id=user.id,
            title=title,
            author=kwargs.pop("author", "Ursula K. Le Guin"),
            genre=kwargs.pop("genre", "Science Fiction"),
            rating=kwargs.pop("rating", 5),
            **kwargs,
        )
        db.add(rec)
        await db.commit()
        return rec

    return _make


@pytest.fixture
def make_book(db):
    async def _make(title: str = "Middlemarch", **kwargs) -> Book:
        book = Book(
            google_books_id=kwargs.pop("google_books_id", uuid.uuid4().hex[:12]),
            title=title,
            authors=kwargs.pop("authors", ["George Eliot"]),
            **kwargs,
        )
        db.add(book)
        await db.commit()
        return book

    return _make


@pytest.fixture
def make_review(db):
    async def _make(user: User, book: Book | None = None, text: str = "A slow, rewarding read.", **kwargs) -> Review:
        review = Review(
            user_id=user.id,
            book_id=book.id if book else None,
            text=text,
            rating=kwargs.pop("rating", 4),
            **kwargs,
        )
        db.add(review)
        await db.commit()
        return review

    return _make


@pytest.fixture
async def alice(make_user):
    return await make_user("alice")


@pytest.fixture
async def bob(make_user):
    return await make_user("bob")


@pytest.fixture
async def carol(make_user):
    return await make_user("carol")


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
