"""Shared pytest fixtures for PlanVision tests."""

from typing import Generator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import planvision.models  # noqa: F401  registers the mappers
from planvision.db.base import Base
from planvision.services.ai_providers import GenerativeProvider, RetryPolicy
from planvision.services.orchestrator import GenerationOrchestrator
from planvision.services.reference_image import ReferenceImage
from planvision.services.render_config import RenderConfigService


class FakeProvider(GenerativeProvider):
    """Provider that replays a scripted list of outcomes.

    Each entry is either bytes to return or an exception to raise. Once the
    script is exhausted, ``default`` is returned.
    """

    def __init__(self, outcomes: Optional[list] = None, default: bytes = b"generated-image"):
        super().__init__(api_key="test-key")
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls: List[dict] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def generate_image(self, prompt, reference_image=None, mime_type="image/jpeg"):
        self.calls.append(
            {"prompt": prompt, "reference_image": reference_image, "mime_type": mime_type}
        )
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return self.default

    async def generate_text(self, prompt):
        return "text"


class FakeStorage:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.objects = {}

    async def store(self, data, content_type="image/jpeg", filename=None):
        if self.error is not None:
            raise self.error
        self.objects[filename] = (data, content_type)
        return f"https://storage.test/{filename}"


class FakeFetcher:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.urls: List[str] = []

    async def fetch(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return ReferenceImage(data=b"source-image", content_type="image/png")


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """In-memory SQLite shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def config_values() -> dict:
    """Column values for a standard kitchen restyle."""
    return {
        "input_image_url": "https://images.test/kitchen.jpg",
        "image_type_label": "Kitchen",
        "image_type_value": "kitchen",
        "style_name": "Scandinavian",
        "style_prompt_fragment": "light woods, clean lines",
        "color_primary_hex": "#336699",
    }


@pytest.fixture
def render_config(db_session, config_values):
    return RenderConfigService(db_session).create_config(config_values, config_id="c1")


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def orchestrator(session_factory, provider, storage, fetcher, recording_sleep) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        provider=provider,
        storage=storage,
        fetcher=fetcher,
        retry_policy=RetryPolicy(max_retries=5, initial_delay=10, max_delay=120, sleep=recording_sleep),
        session_factory=session_factory,
    )
