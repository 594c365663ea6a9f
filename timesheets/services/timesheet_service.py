from typing import Any, List, Optional
from zoneinfo import ZoneInfo
from timesheets.exceptions import AuthenticationError, InvalidInputError
from timesheets.models.schemas import EntryInput, Identity, Project, TimeEntry, MANUAL_PROJECT
from timesheets.services.store import DocumentStore, FilterSpec, ENTRIES, PROJECTS
from timesheets.utils.timezone import as_utc_instant, get_local_now
import math
import logging

logger = logging.getLogger(__name__)


def validate_hours(value: Any) -> float:
    """Numeric, finite and non-negative, or InvalidInputError."""
    if isinstance(value, bool):
        raise InvalidInputError("hours", "must be a number")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError("hours", f"'{value}' is not a number")
    if math.isnan(hours) or math.isinf(hours):
        raise InvalidInputError("hours", "must be a finite number")
    if hours < 0:
        raise InvalidInputError("hours", "must not be negative")
    return hours


def my_entries_filter(user_id: str) -> FilterSpec:
    return FilterSpec(equals={"user_id": user_id}, order_by="date", descending=True)


ALL_ENTRIES_FILTER = FilterSpec(order_by="date", descending=True)


class TimesheetService:
    def __init__(self, store: DocumentStore, tz: ZoneInfo):
        self.store = store
        self.tz = tz

    async def create_project(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("name", "project name is required")

        # Duplicate names are allowed; they share one analytics bucket
        project_id = await self.store.write(PROJECTS, {"name": name})
        logger.info(f"Created project {project_id} ({name})")
        return project_id

    def list_projects(self) -> List[Project]:
        return list(self.store.fetch(PROJECTS).documents)

    def _resolve_project_name(self, project_id: str) -> Optional[str]:
        for project in self.list_projects():
            if project.id == project_id:
                return project.name
        return None

    async def create_entry(self, user: Identity, payload: EntryInput) -> str:
        """
        Persist one time entry for the signed-in user.

        The user's display label is copied onto the entry. Without a project
        name the selected project's name is looked up, then the manual label
        is used.
        """
        if user is None:
            raise AuthenticationError("A signed-in user is required to save entries")
        hours = validate_hours(payload.hours)

        project_id = (payload.project_id or "").strip() or None
        project_name = (payload.project_name or "").strip() or None
        if project_name is None and project_id is not None:
            project_name = self._resolve_project_name(project_id)
            if project_name is None:
                raise InvalidInputError("project_id", f"unknown project '{project_id}'")

        work_date = payload.date or get_local_now(self.tz).date()

        document = {
            "user_id": user.id,
            "user_name": user.display_name,
            "project_id": project_id,
            "project_name": project_name or MANUAL_PROJECT,
            "task": payload.task or "",
            "hours": hours,
            "date": as_utc_instant(work_date),
        }
        entry_id = await self.store.write(ENTRIES, document)
        logger.info(f"Saved entry {entry_id} for {user.id}: {document['project_name']} {hours}h on {work_date}")
        return entry_id

    def my_entries(self, user_id: str) -> List[TimeEntry]:
        """The user's entries, most recent work date first."""
        return list(self.store.fetch(ENTRIES, my_entries_filter(user_id)).documents)
