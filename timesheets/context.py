from timesheets.config import Settings
from timesheets.database import Database
from timesheets.services.store import DocumentStore, ENTRIES, PROJECTS
from timesheets.services.identity_service import IdentityService
from timesheets.services.timesheet_service import TimesheetService, ALL_ENTRIES_FILTER
from timesheets.services.timer_service import TimerRegistry
from timesheets.services.live_view import LiveView
from timesheets.utils.scheduler import TaskScheduler
from timesheets.utils.timezone import get_zone
import logging

logger = logging.getLogger(__name__)


class AppContext:
    """
    Everything the service shares, built once from Settings.

    Created and started by the application lifespan and handed to every
    component; nothing here is initialised at import time.
    """

    def __init__(self, settings: Settings, scheduler: TaskScheduler = None):
        self.settings = settings
        self.tz = get_zone(settings.timezone)

        self.database = Database(settings.database_url) if settings.is_store_configured else None
        self.store = DocumentStore(self.database)
        self.identity = IdentityService(self.database)
        self.timesheets = TimesheetService(self.store, self.tz)

        self.scheduler = scheduler or TaskScheduler(settings.log_dir, settings.log_retention_days)
        self.timers = TimerRegistry(self.scheduler)

        self.entries_view = LiveView(self.store, ENTRIES, ALL_ENTRIES_FILTER)
        self.projects_view = LiveView(self.store, PROJECTS)

    def start(self):
        if self.database is not None:
            self.database.init_db()
            self.entries_view.open()
            self.projects_view.open()
        else:
            logger.warning("DATABASE_URL is not set - store and sign-in are unavailable until it is configured")
        self.scheduler.start()

    def stop(self):
        self.timers.stop_all()
        self.scheduler.stop()
        self.entries_view.close()
        self.projects_view.close()
        self.store.close()
        if self.database is not None:
            self.database.dispose()
