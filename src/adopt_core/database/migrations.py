"""
Schema upgrades through Alembic's command API.

``adopt-core init-db`` calls ``run_migrations``; deploy scripts can do the
same without shelling out to the ``alembic`` binary.
"""

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from ..exceptions import MigrationException

logger = logging.getLogger(__name__)

# src/adopt_core/database/migrations.py -> repository root
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def find_alembic_ini() -> Path:
    """Look in the working directory first, then at the repository root."""
    for candidate in (Path("alembic.ini"), PROJECT_ROOT / "alembic.ini"):
        if candidate.exists():
            return candidate.resolve()
    raise MigrationException("Could not find alembic.ini configuration file")


class MigrationManager:
    """Runs Alembic against ``database_url``, or the environment's URL when unset."""

    def __init__(self, alembic_ini: Optional[Path] = None, database_url: Optional[str] = None):
        self.alembic_ini = Path(alembic_ini) if alembic_ini else find_alembic_ini()
        self.database_url = database_url
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            config = Config(str(self.alembic_ini))
            config.set_main_option("script_location", str(self.alembic_ini.parent / "alembic"))
            if self.database_url:
                # configparser treats % as interpolation
                config.set_main_option("sqlalchemy.url", self.database_url.replace("%", "%%"))
            self._config = config
        return self._config

    def upgrade(self, revision: str = "head") -> None:
        """
        Raises:
            MigrationException: If Alembic fails; the cause is chained
        """
        try:
            command.upgrade(self.config, revision)
        except Exception as e:
            logger.error(f"Upgrade to {revision} failed: {e}")
            raise MigrationException(
                f"Failed to upgrade database to {revision}",
                migration_version=revision,
                original_error=e,
            ) from e
        logger.info(f"Database upgraded to {revision}")

    def get_head_revision(self) -> Optional[str]:
        return ScriptDirectory.from_config(self.config).get_current_head()


def run_migrations(database_url: Optional[str] = None, revision: str = "head") -> None:
    MigrationManager(database_url=database_url).upgrade(revision)
