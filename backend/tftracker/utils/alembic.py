import fcntl
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

from alembic import command
from tftracker.utils.logging import logger

BACKEND_DIR = Path(__file__).resolve().parents[2]
_MIGRATION_LOCK_PATH = Path(tempfile.gettempdir()) / "tftracker-alembic.lock"


@contextmanager
def _migration_lock() -> Iterator[None]:
    with open(_MIGRATION_LOCK_PATH, "w", encoding="utf-8") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file, fcntl.LOCK_UN)


def get_alembic_config() -> Config:
    """Alembic config that works regardless of the current working directory."""
    alembic_config = Config(str(BACKEND_DIR / "alembic.ini"))
    alembic_config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    return alembic_config


def get_head_revision() -> str | None:
    return ScriptDirectory.from_config(get_alembic_config()).get_current_head()


def alembic_run_migrations() -> None:
    with _migration_lock():
        logger.info("Upgrading ledger schema to revision %s", get_head_revision())
        command.upgrade(get_alembic_config(), "head")
