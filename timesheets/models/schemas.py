from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date as date_type, datetime
from typing import Optional, List
from timesheets.utils.timezone import as_utc_instant

MANUAL_PROJECT = "(manual)"


class TimeEntry(BaseModel):
    """A persisted time entry as delivered in snapshots. Never mutated."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    user_id: str
    user_name: str = ""
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    task: str = ""
    hours: Optional[float] = None
    date: datetime
    created_at: Optional[datetime] = None

    @field_validator("date", "created_at", mode="before")
    @classmethod
    def _normalise_instant(cls, value):
        if value is None:
            return value
        return as_utc_instant(value)


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: str
    created_at: Optional[datetime] = None


class Identity(BaseModel):
    """The signed-in user as seen by the rest of the service."""
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    display_name: str


# Request bodies

class EntryInput(BaseModel):
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    task: str = ""
    hours: float = Field(ge=0, allow_inf_nan=False)
    date: Optional[date_type] = None  # defaults to today in the configured timezone


class ProjectInput(BaseModel):
    name: str


class RegisterInput(BaseModel):
    email: str
    password: str = Field(min_length=6)
    display_name: Optional[str] = None


class LoginInput(BaseModel):
    email: str
    password: str


# Responses

class TokenResponse(BaseModel):
    token: str
    user: Identity


class ProjectTotal(BaseModel):
    name: str
    total: float
    total_rounded: float


class AnalyticsResponse(BaseModel):
    days: int
    cutoff: datetime
    projects: List[ProjectTotal]


class SummaryResponse(BaseModel):
    today_total: float
    week_total: float


class TimerState(BaseModel):
    running: bool
    elapsed_seconds: int
    hours: float
    display: str
