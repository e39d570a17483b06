# =============================================================================
# CONFTEST - shared fixtures
# =============================================================================
# In-memory SQLite per test, fake page fetcher and fake quiz generator
# =============================================================================

import json
import os

# db.py refuses to import without a DATABASE_URL
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers tables on Base
from db import Base, get_db
from scraper import PageContent


PAGE_URL = "https://a.example/x"
PAGE_TEXT = " ".join(f"word{i}" for i in range(100))


def item_dict(stem, correct=0):
    return {
        "stem": stem,
        "options": [f"{stem} A", f"{stem} B", f"{stem} C", f"{stem} D"],
        "correctOption": correct,
        "sourceSnippet": f"snippet for {stem}",
    }


def items_json(n, prefix="Q"):
    return [item_dict(f"{prefix}{i}?", correct=i % 4) for i in range(n)]


class FakeFetcher:
    def __init__(self, page=None, error=None):
        self.page = page or PageContent(title="X", text=PAGE_TEXT, favicon="https://a.example/favicon.ico")
        self.error = error
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.error:
            raise self.error
        return self.page


class FakeGenerator:
    """Replays queued responses; an Exception in the queue is raised instead."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def generate(self, context, task):
        self.calls.append((context, task))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def quiz_response():
    """Create-quiz generator text, optionally wrapped in a ```json fence."""
    def _make(title="Ten Things About X", slug="ten-things-about-x", n=10, prefix="Q", fenced=False):
        text = json.dumps({"title": title, "slug": slug, "items": items_json(n, prefix)})
        return f"```json\n{text}\n```" if fenced else text
    return _make


@pytest.fixture
def items_response():
    """Revise generator text: a JSON array of n items."""
    def _make(n, prefix="New"):
        return json.dumps(items_json(n, prefix))
    return _make


@pytest.fixture
def webpage(db):
    page = models.Webpage(url=PAGE_URL, title="X", text=PAGE_TEXT, favicon=None)
    db.add(page)
    db.commit()
    db.refresh(page)
    return page


@pytest.fixture
def client(session_factory, fetcher, generator):
    """TestClient with storage and both outbound clients replaced."""
    from fastapi.testclient import TestClient
    from main import app, get_fetcher, get_generator

    def override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    app.dependency_overrides[get_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()
