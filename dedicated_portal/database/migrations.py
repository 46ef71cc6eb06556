"""SQL schema migrations.

Migrations are plain ``.sql`` files applied in lexical file-name order. The
file stem is the migration version; applied versions are recorded in the
``schema_migrations`` table so every file runs exactly once per database.
"""

from pathlib import Path
from typing import List

from .connection import AsyncDatabaseConnection
from ..utils.logger import get_logger

logger = get_logger(__name__)

MIGRATIONS_ROOT = Path(__file__).resolve().parent.parent / "data" / "migrations"

VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version VARCHAR(255) PRIMARY KEY,
    applied_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


def migrations_dir(service: str) -> Path:
    """Directory holding the packaged migrations of a service."""
    return MIGRATIONS_ROOT / service


def split_statements(script: str) -> List[str]:
    """Split a migration script into individual statements."""
    lines = [line for line in script.splitlines() if not line.strip().startswith("--")]
    return [stmt.strip() for stmt in "\n".join(lines).split(";") if stmt.strip()]


async def applied_versions(db: AsyncDatabaseConnection) -> List[str]:
    rows = await db.fetch_all("SELECT version FROM schema_migrations ORDER BY version")
    return [row["version"] for row in rows]


async def ensure_schema(db: AsyncDatabaseConnection, directory: Path) -> List[str]:
    """Apply pending migrations from ``directory`` and return their versions."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Migrations directory '{directory}' doesn't exist")

    await db.execute(VERSION_TABLE)
    done = set(await applied_versions(db))

    applied = []
    for path in sorted(directory.glob("*.sql")):
        version = path.stem
        if version in done:
            continue

        logger.info(f"Applying migration {version}")
        async with db.transaction() as tx:
            for statement in split_statements(path.read_text()):
                await tx.execute(statement)
            await tx.insert("schema_migrations", {"version": version})
        applied.append(version)

    if applied:
        logger.info(f"Applied {len(applied)} migration(s) from {directory}")
    else:
        logger.info("Database schema is up to date")
    return applied
