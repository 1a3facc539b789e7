"""Unit of work: one session, its repositories, and post-commit callbacks.

``transaction()`` commits once when the block exits cleanly and rolls back
everything on any exception, so a failed operation leaves no partial writes.
Callbacks registered with ``after_commit`` run only once the commit has
succeeded; each runs in isolation and a failing callback is logged, never
re-raised, so side effects cannot unwind persisted state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from termtrack.storage.sqlite import (
    SqliteBranchRepository,
    SqliteCommitRepository,
    SqliteMembershipRepository,
    SqliteProjectRepository,
    SqliteUserRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Repositories sharing one session, plus deferred side effects."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.projects = SqliteProjectRepository(session)
        self.branches = SqliteBranchRepository(session)
        self.commits = SqliteCommitRepository(session)
        self.users = SqliteUserRepository(session)
        self.memberships = SqliteMembershipRepository(session)
        self._callbacks: list[Callable[[], None]] = []

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Defer *callback* until the transaction has committed."""
        self._callbacks.append(callback)

    @property
    def pending_callbacks(self) -> list[Callable[[], None]]:
        return list(self._callbacks)


def run_callbacks(callbacks: list[Callable[[], None]]) -> None:
    for callback in callbacks:
        try:
            callback()
        except Exception:
            logger.warning("Post-commit side effect failed", exc_info=True)


@contextmanager
def transaction(session_factory: sessionmaker[Session]) -> Iterator[UnitOfWork]:
    """Open a session, yield a UnitOfWork, commit or roll back, then run callbacks.

    Example::

        with transaction(factory) as uow:
            branch = uow.branches.get(project_id, "main", for_update=True)
            ...
            uow.after_commit(lambda: publisher.publish(event))
    """
    session = session_factory()
    uow = UnitOfWork(session)
    try:
        yield uow
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    run_callbacks(uow.pending_callbacks)
