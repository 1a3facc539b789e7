"""SQLAlchemy ORM schema for termtrack.

Defines all database tables: projects, branches, commits, users,
team_memberships, _termtrack_meta.

Snapshots (branch working terms, commit terms) are stored as JSON arrays of
term dicts. They are always written by assigning a fresh list, never by
mutating the loaded value in place.

UserRole is imported from the domain models -- it is NOT redefined here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from termtrack.models.team import UserRole


class UTCDateTime(TypeDecorator):
    """DateTime stored as naive UTC and always loaded as aware UTC.

    SQLite keeps no offset, so without this a row reads back naive even
    when it was written aware. Naive input is taken to be UTC already.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """Base class for all termtrack ORM models."""

    pass


class UserRow(Base):
    """A user account, referenced as commit author and team member."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    avatar_initials: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    settings_json: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)


class ProjectRow(Base):
    """A localization project. Owns branches and team memberships."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    default_language_code: Mapped[str] = mapped_column(
        String(16), nullable=False, default=""
    )
    languages_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    current_branch_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default="main"
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    branches: Mapped[list["BranchRow"]] = relationship(
        "BranchRow",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    memberships: Mapped[list["TeamMembershipRow"]] = relationship(
        "TeamMembershipRow",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TeamMembershipRow(Base):
    """Association of a user with a project: role plus assigned languages."""

    __tablename__ = "team_memberships"

    project_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role: Mapped[UserRole] = mapped_column(nullable=False)
    languages_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    user: Mapped["UserRow"] = relationship("UserRow", lazy="joined")


class BranchRow(Base):
    """A named line of history with a mutable working snapshot."""

    __tablename__ = "branches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    working_terms: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    project: Mapped["ProjectRow"] = relationship("ProjectRow", back_populates="branches")
    commits: Mapped[list["CommitRow"]] = relationship(
        "CommitRow",
        back_populates="branch",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_branches_project_name"),
    )


class CommitRow(Base):
    """An immutable snapshot of terms recorded on a branch.

    ``seq`` is a per-branch insertion counter that breaks ties between
    commits sharing a timestamp; history order is (created_at, seq).
    """

    __tablename__ = "commits"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    terms_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    branch: Mapped["BranchRow"] = relationship("BranchRow", back_populates="commits")
    author: Mapped[Optional["UserRow"]] = relationship("UserRow", lazy="select")

    __table_args__ = (
        Index("ix_commits_branch_time", "branch_id", "created_at", "seq"),
    )


class TermTrackMetaRow(Base):
    """Key-value metadata for the termtrack database itself (e.g., schema version)."""

    __tablename__ = "_termtrack_meta"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
