import sqlite3
from pathlib import Path

import pytest

from portable_content.adapters.sqlite.database import connect_in_memory
from portable_content.adapters.sqlite.migrator import run_migrations
from portable_content.adapters.sqlite.repos import SQLiteContentRepo
from portable_content.core.services.validation import create_validation_service
from portable_content.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def rules_path() -> Path:
    """The real rules.yaml at the project root."""
    return PROJECT_ROOT / "rules.yaml"


@pytest.fixture
def rules(rules_path):
    return load_rules(rules_path)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "content.db")


@pytest.fixture
def conn():
    """In-memory database with the schema applied."""
    connection = connect_in_memory()
    run_migrations(connection)
    yield connection
    connection.close()


@pytest.fixture
def repo(conn: sqlite3.Connection):
    return SQLiteContentRepo(connection=conn)


@pytest.fixture
def validation(rules):
    return create_validation_service(rules)


@pytest.fixture
def valid_data():
    return {
        "type": "note",
        "title": "Hello",
        "summary": "A short note",
        "blocks": [{"kind": "markdown", "source": "# Hi\n\nBody"}],
    }
