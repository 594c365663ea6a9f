from sqlalchemy import Column, String, Float, DateTime, Text, ForeignKey
from datetime import datetime, timezone
from uuid import uuid4
from timesheets.database import Base


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimeEntryRecord(Base):
    __tablename__ = "entries"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(32), nullable=False, index=True)
    user_name = Column(String(200), nullable=False, default="")
    project_id = Column(String(32), nullable=True)  # NULL means a manual entry
    project_name = Column(String(200), nullable=True)
    task = Column(Text, nullable=False, default="")
    hours = Column(Float, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)  # UTC midnight of the work day
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<TimeEntryRecord(user={self.user_name}, project={self.project_name}, hours={self.hours}, date={self.date})>"


class ProjectRecord(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<ProjectRecord(name={self.name})>"


class UserRecord(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String(254), nullable=False, unique=True, index=True)
    display_name = Column(String(200), nullable=False)
    password_hash = Column(String(256), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class AuthSessionRecord(Base):
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
