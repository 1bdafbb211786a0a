"""
MODULE: database_work.apply_schema
RESPONSIBILITY: Create the board backend tables.
ALLOWED: core.database, config.
FORBIDDEN: Data changes beyond DDL.
ERRORS: StorageError.

Applies database_work/schema.sql. The script is idempotent.

    python -m database_work.apply_schema
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from config import SCHEMA_SQL_PATH
from config.settings import config
from core.database import DatabaseManager
from core.exceptions import StorageError
from logger import configure_logging


def apply_schema(db_manager: DatabaseManager, sql_file: Optional[Path] = None) -> None:
    """
    Execute the schema script in one transaction

    Raises:
        FileNotFoundError: If the script is missing
        StorageError: If PostgreSQL rejects it
    """
    sql_file = sql_file or SCHEMA_SQL_PATH
    if not sql_file.exists():
        raise FileNotFoundError(f"Schema file not found: {sql_file}")

    sql_script = sql_file.read_text(encoding="utf-8")
    db_manager.execute_script(sql_script)
    logger.info(f"Schema applied from {sql_file.name}")


def main() -> int:
    configure_logging(config.app, file_sinks=False)
    try:
        with DatabaseManager(config.database) as db_manager:
            apply_schema(db_manager)
    except (FileNotFoundError, StorageError) as e:
        logger.error(f"Schema migration failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
