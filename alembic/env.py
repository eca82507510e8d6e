import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings  # noqa: E402
from database import Base  # noqa: E402
import models  # noqa: E402,F401  transactions table lives on Base.metadata


alembic_cfg = context.config
if alembic_cfg.config_file_name is not None:
    fileConfig(alembic_cfg.config_file_name)

# LEDGER_DATABASE_URL wins over whatever alembic.ini says
alembic_cfg.set_main_option("sqlalchemy.url", get_settings().database_url)

LEDGER_METADATA = Base.metadata


def _configure_kwargs() -> dict:
    # SQLite cannot ALTER most columns in place
    is_sqlite = alembic_cfg.get_main_option("sqlalchemy.url", "").startswith("sqlite")
    return {
        "target_metadata": LEDGER_METADATA,
        "compare_type": True,
        "render_as_batch": is_sqlite,
    }


def migrate_offline() -> None:
    """Emit the ledger schema as SQL without opening a connection."""
    context.configure(
        url=alembic_cfg.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )
    with context.begin_transaction():
        context.run_migrations()


def migrate_online() -> None:
    engine = engine_from_config(
        alembic_cfg.get_section(alembic_cfg.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs())
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    migrate_offline()
else:
    migrate_online()
