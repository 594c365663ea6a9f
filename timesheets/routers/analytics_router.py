from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from typing import Optional
from timesheets.context import AppContext
from timesheets.models.schemas import AnalyticsResponse, Identity, ProjectTotal, SummaryResponse
from timesheets.routers.deps import get_context, get_current_user
from timesheets.services import analytics_service
from timesheets.exceptions import InvalidInputError
from timesheets.utils.rounding import round_hours
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analytics", tags=["analytics"])


def _window_days(days: Optional[int], context: AppContext) -> int:
    days = context.settings.default_window_days if days is None else days
    if days < 1 or days > context.settings.max_window_days:
        raise InvalidInputError("days", f"must be between 1 and {context.settings.max_window_days}")
    return days


@router.get("/projects", response_model=AnalyticsResponse)
async def project_totals(
    days: Optional[int] = Query(None),
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    days = _window_days(days, context)
    entries = context.entries_view.documents
    totals = analytics_service.aggregate_by_project(entries, days, tz=context.tz)
    return AnalyticsResponse(
        days=days,
        cutoff=analytics_service.window_cutoff(days, tz=context.tz),
        projects=[
            ProjectTotal(name=name, total=total, total_rounded=round_hours(total))
            for name, total in sorted(totals, key=lambda pair: pair[1], reverse=True)
        ]
    )


@router.get("/summary", response_model=SummaryResponse)
async def quick_summary(
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    summary = analytics_service.compute_summary(context.entries_view.documents, user.id, tz=context.tz)
    return SummaryResponse(today_total=summary.today_total, week_total=summary.week_total)


@router.get("/export")
async def export_csv(
    days: Optional[int] = Query(None),
    user: Identity = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    days = _window_days(days, context)
    export = analytics_service.build_export(context.entries_view.documents, days, tz=context.tz)
    logger.info(f"CSV export for {user.id}: {export.filename}")
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )
