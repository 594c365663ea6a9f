import logging
import logging.handlers
import time
from datetime import datetime
from pathlib import Path


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter, max_mb: int, backups: int):
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_mb*1024*1024,
        backupCount=backups,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: str = "logs", level: str = "INFO"):
    """
    Configure logging for the timesheet service.
    Console plus rotating files: app-wide, per component, and errors only.
    """

    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_format = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # Console handler (for Docker logs)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(log_format)
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(logs_dir / "app.log", log_level, log_format, 10, 5))

    # Component log files
    components = {
        'timesheets.services.store': "store.log",
        'timesheets.services.identity_service': "identity.log",
        'timesheets.utils.scheduler': "scheduler.log",
    }
    for logger_name, filename in components.items():
        component_logger = logging.getLogger(logger_name)
        for handler in list(component_logger.handlers):
            component_logger.removeHandler(handler)
            handler.close()
        component_logger.addHandler(_rotating_handler(logs_dir / filename, logging.DEBUG, log_format, 5, 3))
        component_logger.setLevel(logging.DEBUG)

    # Error-only log file for critical issues
    root_logger.addHandler(_rotating_handler(logs_dir / "errors.log", logging.ERROR, log_format, 5, 5))

    # Suppress noisy third-party loggers
    logging.getLogger('apscheduler').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configuration completed")
    logger.info(f"Log files will be saved to: {logs_dir.absolute()}")

    return logs_dir


def get_log_files_info(log_dir: str = "logs"):
    """
    Get information about current log files for debugging.
    """
    logs_dir = Path(log_dir)
    if not logs_dir.exists():
        return {"status": "No logs directory found"}

    log_files = {}
    for log_file in logs_dir.glob("*.log"):
        try:
            stat = log_file.stat()
            log_files[log_file.name] = {
                "size_mb": round(stat.st_size / (1024*1024), 2),
                "modified": datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
            }
        except OSError as e:
            log_files[log_file.name] = {"error": str(e)}

    return log_files


def cleanup_old_logs(log_dir: str = "logs", days_to_keep: int = 30):
    """
    Clean up log files older than specified days.
    """
    logs_dir = Path(log_dir)
    if not logs_dir.exists():
        return []

    cutoff_time = time.time() - (days_to_keep * 24 * 60 * 60)

    cleaned_files = []
    for log_file in logs_dir.glob("*.log*"):
        try:
            if log_file.stat().st_mtime < cutoff_time:
                log_file.unlink()
                cleaned_files.append(log_file.name)
        except OSError as e:
            logging.getLogger(__name__).warning(f"Failed to clean up {log_file}: {e}")

    if cleaned_files:
        logging.getLogger(__name__).info(f"Cleaned up old log files: {cleaned_files}")
    return cleaned_files
