from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from sqldao.core.engine import SqlEngine

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def person_mapper() -> Path:
    return FIXTURES / "person.xml"


@pytest.fixture
def fake_engine() -> MagicMock:
    """SqlEngine stand-in; ``query`` is an AsyncMock returning [] by default."""
    engine = MagicMock(spec=SqlEngine)
    engine.query_types = SqlEngine.query_types
    engine.query = AsyncMock(return_value=[])
    return engine


@pytest.fixture
def write_mapper(tmp_path: Path):
    """Write an XML mapping document under tmp_path and return its path."""

    def _write(body: str, name: str = "mapper.xml") -> Path:
        path = tmp_path / name
        path.write_text(body, encoding="utf-8")
        return path

    return _write
