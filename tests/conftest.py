"""
pytest Fixtures for DigiRead API Tests

This file contains shared fixtures used across all test files.

For database tests, we use:
- session scope for the engine (expensive to create)
- function scope for sessions (each test rolls back)

External collaborators (mail, object storage) are replaced with in-memory
fakes through app.dependency_overrides, so no test talks to the network.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting and sets a test secret key
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["ENVIRONMENT"] = "development"
os.environ["VERIFICATION_LINK"] = "http://testserver/api/v1/auth/verify"
os.environ["AUTH_SUCCESS_URL"] = "http://frontend.test/api/auth/success"

from collections.abc import Generator
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from digiread.database import Base, get_db
from digiread.dependencies import get_mail_sender, get_object_store
from digiread.main import app
from digiread.models import Author, Book, User, UserRole


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================
class FakeMailSender:
    """Records verification mails instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_verification_link(self, to: str, link: str, name: str) -> None:
        self.sent.append({"to": to, "link": link, "name": name})

    @property
    def last_link(self) -> str:
        return self.sent[-1]["link"]


class FakeObjectStore:
    """Keeps objects in a dict and hands out predictable URLs."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.deleted: list[tuple[str, str]] = []
        self.signed: list[tuple[str, str, str]] = []

    def put(self, bucket: str, key: str, body: bytes, content_type: str | None = None) -> str:
        self.objects[(bucket, key)] = body
        return f"https://cdn.test/{bucket}/{key}"

    def delete(self, bucket: str, key: str) -> None:
        self.deleted.append((bucket, key))
        self.objects.pop((bucket, key), None)

    def signed_upload_url(self, bucket: str, key: str, content_type: str) -> str:
        self.signed.append((bucket, key, content_type))
        return f"https://signed.test/{bucket}/{key}"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, SQLite in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def mailer() -> FakeMailSender:
    return FakeMailSender()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture(scope="function")
def client(
    db_session: Session,
    mailer: FakeMailSender,
    object_store: FakeObjectStore,
) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and fake collaborators.
    """

    def override_get_db():
        """Provide test database session instead of real one."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_sender] = lambda: mailer
    app.dependency_overrides[get_object_store] = lambda: object_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
@pytest.fixture
def sample_user(db_session: Session) -> User:
    """A signed-up reader."""
    user = User(email="reader@example.com", name="Jane Reader", signed_up=True)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def new_user(db_session: Session) -> User:
    """A user who asked for a link but never verified one."""
    user = User(email="newcomer@example.com", signed_up=False)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def author_user(db_session: Session) -> User:
    """A signed-up user with an author profile."""
    user = User(email="writer@example.com", name="John Writer", signed_up=True)
    db_session.add(user)
    db_session.flush()

    author = Author(
        user_id=user.id,
        name="John Writer",
        about="A" * 120,
        social_links=["https://example.com/john"],
    )
    db_session.add(author)
    db_session.flush()
    author.slug = f"john-writer-{author.id}"

    user.role = UserRole.AUTHOR.value
    user.author_id = author.id
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def sample_book(db_session: Session, author_user: User) -> Book:
    book = Book(
        author_id=author_user.author_id,
        title="The Silent Sea",
        description="A novel about the ocean.",
        language="English",
        publication_name="Harbor Press",
        genre="Fiction",
        published_at=date(2023, 5, 1),
        price_mrp=1250,
        price_sale=999,
        file_id="1-the-silent-sea.epub",
        file_size="1.25MB",
        cover_id="1-the-silent-sea.png",
        cover_url="https://cdn.test/digiread-public/1-the-silent-sea.png",
    )
    db_session.add(book)
    db_session.flush()
    book.slug = f"the-silent-sea-{book.id}"
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def owned_book(db_session: Session, sample_user: User, sample_book: Book) -> Book:
    """sample_book placed in sample_user's library."""
    sample_user.books.append(sample_book)
    db_session.commit()
    return sample_book
