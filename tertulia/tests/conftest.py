"""
Pytest fixtures shared across all test modules.
Uses an in-memory SQLite database with StaticPool so all connections
share a single in-memory DB, so no real Postgres is required.
"""

import os

# Set env vars BEFORE any app module is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-chars-long!!"
os.environ["ALGORITHM"] = "HS256"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Import app modules AFTER env vars are set
from tertulia.core.capabilities import DEFAULT_CAPABILITIES, ROLE_USER  # noqa: E402
from tertulia.database import Base, get_db  # noqa: E402
from tertulia.main import app  # noqa: E402
from tertulia.models.comment import Comment  # noqa: E402
from tertulia.models.post import Post  # noqa: E402
from tertulia.models.user import User  # noqa: E402
from tertulia.models.user_capability import UserCapability  # noqa: E402
from tertulia.services.auth_service import create_access_token  # noqa: E402

# Single shared in-memory SQLite engine. StaticPool ensures all
# connections share the same DB instance.
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_db():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def register_user(client: TestClient, username="testuser", email="test@example.com", password="Password1!", **extra):
    return client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password, **extra},
    )


def auth_headers(client: TestClient, username="testuser", email="test@example.com", password="Password1!"):
    resp = register_user(client, username=username, email=email, password=password)
    assert resp.status_code == 200, f"Registration failed: {resp.json()}"
    token = resp.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def me(client: TestClient, headers: dict) -> dict:
    return client.get("/api/auth/me", headers=headers).json()


def create_post(client: TestClient, headers: dict, content="Hello, tertulia!", visibility="public") -> dict:
    resp = client.post("/api/posts", json={"content": content, "visibility": visibility}, headers=headers)
    assert resp.status_code == 201, resp.json()
    return resp.json()


def make_user(db, username: str, role: str = ROLE_USER) -> User:
    """Insert a user straight into the database (no bcrypt round, no token)."""
    user = User(username=username, email=f"{username}@example.com", hashed_password="x", role=role)
    user.capabilities = [UserCapability(name=c.value) for c in DEFAULT_CAPABILITIES]
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_post(db, author: User, content="a post", visibility="public") -> Post:
    post = Post(user_id=author.id, content=content, visibility=visibility)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def make_comment(db, post: Post, author: User, content="nice") -> Comment:
    comment = Comment(post_id=post.id, user_id=author.id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def headers_for(user: User) -> dict:
    """Bearer headers for a user made with make_user."""
    return {"Authorization": f"Bearer {create_access_token(user)}"}
