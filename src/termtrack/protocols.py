"""Protocols for termtrack's external collaborators.

The version control core talks to three collaborators it does not own:

- EventPublisher: receives fire-and-forget change events.
- Mailer: delivers templated e-mail.
- TeamDirectory: lists a project's members with notification settings.

All use typing.Protocol so any object with the right methods works,
no inheritance needed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from termtrack.events import BranchChanged
    from termtrack.models.team import TeamMember


@runtime_checkable
class EventPublisher(Protocol):
    """Receives change events after the owning transaction committed."""

    def publish(self, event: BranchChanged) -> None:
        ...


@runtime_checkable
class Mailer(Protocol):
    """Sends one HTML e-mail. Implementations log their own failures."""

    def send_email(self, to: str, subject: str, html: str) -> None:
        ...


@runtime_checkable
class TeamDirectory(Protocol):
    """Read-only view of a project's team."""

    def list_members(self, project_id: str) -> list[TeamMember]:
        ...
