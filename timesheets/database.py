from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from contextlib import contextmanager
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Engine + session factory built from a database URL.

    One instance lives on the application context; nothing is created at
    import time.
    """

    def __init__(self, database_url: str):
        connect_args = {}
        if database_url.startswith("sqlite"):
            # Sessions are opened from the event loop and from FastAPI's threadpool
            connect_args["check_same_thread"] = False

        self.url = database_url
        self.engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self):
        # Import models so they register on Base.metadata
        from timesheets.models import timesheet  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database initialised ({self.engine.url.get_backend_name()})")

    @contextmanager
    def session(self):
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()
        logger.info("Database connections closed")
