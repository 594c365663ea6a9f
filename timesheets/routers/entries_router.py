from fastapi import APIRouter, Depends
from typing import List
from timesheets.context import AppContext
from timesheets.models.schemas import EntryInput, Identity, Project, ProjectInput, TimeEntry
from timesheets.routers.deps import get_context, get_current_user
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["timesheets"])


@router.get("/projects", response_model=List[Project])
async def list_projects(
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    return list(context.projects_view.documents)


@router.post("/projects", status_code=201)
async def create_project(
    body: ProjectInput,
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    project_id = await context.timesheets.create_project(body.name)
    return {"id": project_id, "name": body.name.strip()}


@router.post("/entries", status_code=201)
async def create_entry(
    body: EntryInput,
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    entry_id = await context.timesheets.create_entry(user, body)
    # Saving from the log-time form clears the form's timer
    context.timers.get(user.id).reset()
    return {"id": entry_id, "message": f"Saved - ID: {entry_id}"}


@router.get("/entries/mine", response_model=List[TimeEntry])
async def my_entries(
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    return context.timesheets.my_entries(user.id)
