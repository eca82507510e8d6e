import logging
import os
import secrets
from functools import lru_cache
from pathlib import Path


logger = logging.getLogger(__name__)


class Settings:
    def __init__(
        self,
        database_url: str,
        session_secret: str,
        session_max_age_hours: int,
        session_cookie: str,
        report_cache_ttl_secs: float,
        report_cache_max_entries: int,
        log_level: str,
    ) -> None:
        self.database_url = database_url
        self.session_secret = session_secret
        self.session_max_age_hours = session_max_age_hours
        self.session_cookie = session_cookie
        self.report_cache_ttl_secs = report_cache_ttl_secs
        self.report_cache_max_entries = report_cache_max_entries
        self.log_level = log_level


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("LEDGER_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "ledger.db"
    database_url = os.getenv("LEDGER_DATABASE_URL", f"sqlite:///{default_db}")
    session_secret = os.getenv("LEDGER_SESSION_SECRET", "")
    if not session_secret:
        # tokens signed with this secret die with the process
        session_secret = secrets.token_hex(32)
        logger.warning(
            "session_secret: LEDGER_SESSION_SECRET is unset, using a per-process random secret"
        )
    session_max_age_hours = int(os.getenv("LEDGER_SESSION_MAX_AGE_HOURS", "168"))
    session_cookie = os.getenv("LEDGER_SESSION_COOKIE", "ledger_session")
    report_cache_ttl_secs = float(os.getenv("LEDGER_REPORT_CACHE_TTL_SECS", "0"))
    report_cache_max_entries = int(
        os.getenv("LEDGER_REPORT_CACHE_MAX_ENTRIES", "1024")
    )
    log_level = os.getenv("LEDGER_LOG_LEVEL", "INFO").upper()
    return Settings(
        database_url=database_url,
        session_secret=session_secret,
        session_max_age_hours=session_max_age_hours,
        session_cookie=session_cookie,
        report_cache_ttl_secs=report_cache_ttl_secs,
        report_cache_max_entries=report_cache_max_entries,
        log_level=log_level,
    )
