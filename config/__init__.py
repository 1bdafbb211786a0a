from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
SCHEMA_SQL_PATH = BASE_DIR / "database_work" / "schema.sql"
