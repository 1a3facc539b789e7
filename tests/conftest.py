"""Shared test fixtures for termtrack.

Provides in-memory SQLite engine, session, repository and service fixtures.
"""

import pytest
from sqlalchemy.orm import Session, sessionmaker

from termtrack.events import InMemoryPublisher
from termtrack.models.config import TermTrackConfig
from termtrack.models.team import UserSettings
from termtrack.service import VersionControlService
from termtrack.storage.engine import (
    create_session_factory,
    create_termtrack_engine,
    init_db,
)
from termtrack.storage.sqlite import (
    SqliteBranchRepository,
    SqliteCommitRepository,
    SqliteMembershipRepository,
    SqliteProjectRepository,
    SqliteUserRepository,
)


class RecordingMailer:
    """Mailer that remembers every message instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send_email(self, to: str, subject: str, html: str) -> None:
        self.sent.append((to, subject, html))

    @property
    def recipients(self) -> list[str]:
        return [to for to, _, _ in self.sent]


class FailingMailer:
    def send_email(self, to: str, subject: str, html: str) -> None:
        raise ConnectionError("smtp down")


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_termtrack_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def project_repo(session: Session) -> SqliteProjectRepository:
    return SqliteProjectRepository(session)


@pytest.fixture
def branch_repo(session: Session) -> SqliteBranchRepository:
    return SqliteBranchRepository(session)


@pytest.fixture
def commit_repo(session: Session) -> SqliteCommitRepository:
    return SqliteCommitRepository(session)


@pytest.fixture
def user_repo(session: Session) -> SqliteUserRepository:
    return SqliteUserRepository(session)


@pytest.fixture
def membership_repo(session: Session) -> SqliteMembershipRepository:
    return SqliteMembershipRepository(session)


@pytest.fixture
def publisher() -> InMemoryPublisher:
    return InMemoryPublisher()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def service(engine, publisher, mailer):
    """Service over the in-memory engine with recording collaborators."""
    svc = VersionControlService.from_components(
        session_factory=create_session_factory(engine),
        config=TermTrackConfig(),
        publisher=publisher,
        mailer=mailer,
    )
    yield svc
    svc.close()


@pytest.fixture
def owner(service):
    return service.add_user(
        "Ada Lovelace",
        "ada@example.com",
        settings=UserSettings(commit_notifications=True),
    )


@pytest.fixture
def project(service, owner, publisher):
    """A fresh project; setup events are cleared so tests start from zero."""
    info = service.create_project("Website", owner.id)
    publisher.clear()
    return info


@pytest.fixture
def add_terms(service, publisher):
    """Add terms to a project's current branch and return their ids.

    Events from the additions are cleared.
    """

    def _add(project_id: str, *texts: str) -> list[str]:
        ids = [service.add_term(project_id, text).id for text in texts]
        publisher.clear()
        return ids

    return _add


@pytest.fixture
def make_service(engine, publisher):
    """Build another service on the same engine with custom collaborators."""

    def _make(**kwargs) -> VersionControlService:
        kwargs.setdefault("publisher", publisher)
        return VersionControlService.from_components(
            session_factory=create_session_factory(engine), **kwargs
        )

    return _make
