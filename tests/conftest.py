# tests/conftest.py
"""Shared test fixtures.

Collaborator fakes live in tests/helpers/collaborators.py and form
definitions in tests/helpers/forms.py. The fixtures here wire them into
a SubmissionPipeline with a pinned clock.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from datetime import UTC, datetime

import pytest
from hypothesis import Phase, Verbosity, settings

from formflow.contracts.request import RequestContext, UserInfo
from formflow.core.clock import MockClock
from formflow.core.config import EmailDefaults, FormflowSettings, SiteSettings
from formflow.engine.pipeline import SubmissionPipeline
from formflow.plugins.manager import HookBus
from formflow.tokens.engine import TokenEngine
from tests.helpers.collaborators import (
    MemoryRepository,
    MemorySession,
    RecordingTransport,
    StagedUploads,
    StaticCapabilities,
    StaticContent,
)
from tests.helpers.forms import CSRF_TOKEN

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Installation and request fixtures
# =============================================================================


@pytest.fixture
def formflow_settings() -> FormflowSettings:
    return FormflowSettings(
        site=SiteSettings(title="Example Site", tagline="Just testing", admin_email="admin@example.com"),
        email=EmailDefaults(
            default_email_address="owner@example.com",
            default_email_name="Site Owner",
            default_from_email_address="noreply@example.com",
            default_from_email_name="Example Site",
        ),
    )


@pytest.fixture
def clock() -> MockClock:
    return MockClock(datetime(2024, 3, 15, 14, 30, 5, tzinfo=UTC))


@pytest.fixture
def hooks() -> HookBus:
    return HookBus()


@pytest.fixture
def content() -> StaticContent:
    return StaticContent(
        posts={42: {"ID": 42, "post_title": "Contact us"}},
        meta={42: {"campaign": "spring"}},
    )


@pytest.fixture
def request_context() -> RequestContext:
    return RequestContext(
        client_ip="203.0.113.9",
        current_url="https://example.com/contact?a=1",
        user_agent="pytest-agent/1.0",
        referrer="https://search.example/?q=forms",
        post_id=42,
    )


@pytest.fixture
def member_request(request_context: RequestContext) -> RequestContext:
    user = UserInfo(id=5, login="ada", email="ada@example.com", display_name="Ada Lovelace", meta={"team": "Engines"})
    return RequestContext(
        client_ip=request_context.client_ip,
        current_url=request_context.current_url,
        user_agent=request_context.user_agent,
        referrer=request_context.referrer,
        user=user,
        post_id=request_context.post_id,
    )


@pytest.fixture
def token_engine(
    formflow_settings: FormflowSettings,
    hooks: HookBus,
    content: StaticContent,
    clock: MockClock,
) -> TokenEngine:
    return TokenEngine(formflow_settings, hooks=hooks, content=content, clock=clock)


# =============================================================================
# Collaborator fixtures
# =============================================================================


@pytest.fixture
def repository() -> MemoryRepository:
    return MemoryRepository()


@pytest.fixture
def session() -> MemorySession:
    return MemorySession(csrf_token=CSRF_TOKEN)


@pytest.fixture
def uploads() -> StagedUploads:
    return StagedUploads()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def capabilities() -> StaticCapabilities:
    return StaticCapabilities()


@pytest.fixture
def pipeline(
    formflow_settings: FormflowSettings,
    repository: MemoryRepository,
    session: MemorySession,
    uploads: StagedUploads,
    transport: RecordingTransport,
    capabilities: StaticCapabilities,
    hooks: HookBus,
    content: StaticContent,
    clock: MockClock,
) -> SubmissionPipeline:
    return SubmissionPipeline(
        formflow_settings,
        repository=repository,
        session=session,
        uploads=uploads,
        transport=transport,
        capabilities=capabilities,
        hooks=hooks,
        content=content,
        clock=clock,
    )
