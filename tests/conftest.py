"""Shared test fixtures."""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from reporthub.config import Settings
from reporthub.context import AppContext
from reporthub.main import app
from reporthub.models.user import AuthSession, User
from reporthub.services.mailer import Mailer, MailerError
from reporthub.utils.clock import utcnow


class FakeCompletions:
    def __init__(self, content="<h1>Introduction</h1><p>Body text.</p>", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


class FakeLLM:
    """Stands in for openai.OpenAI: exposes chat.completions.create."""

    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


class RecordingMailer(Mailer):
    def __init__(self, fail=False):
        super().__init__(api_key="test-key", sender="Report Hub <test@example.com>")
        self.fail = fail
        self.sent = []

    def send(self, to, subject, html):
        if self.fail:
            raise MailerError("mail down")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return "msg-1"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'reporthub.db'}",
        storage_dir=str(tmp_path / "storage"),
        public_base_url="http://testserver",
        app_origin="http://app.test",
        workflow_secret="shh",
        tracking_tick_seconds=30,
        fulfilment_webhook_url=None,
    )


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def ctx(settings, fake_llm, mailer):
    context = AppContext.create(settings, llm_client=fake_llm, mailer=mailer)
    yield context
    context.close()


@pytest.fixture
def client(ctx):
    app.state.context = ctx
    with TestClient(app) as c:
        yield c
    app.state.context = None


@pytest.fixture
def make_user(ctx):
    """Create a user with a live session token; returns (user_id, headers)."""

    def _make(email="asha@example.com", full_name="Asha"):
        with ctx.session() as session:
            user = User(email=email, full_name=full_name)
            session.add(user)
            session.commit()
            session.refresh(user)
            token = f"token-{user.id}"
            session.add(AuthSession(token=token, user_id=user.id, expires_at=utcnow() + timedelta(hours=1)))
            session.commit()
            return user.id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def auth_headers(user):
    return user[1]
