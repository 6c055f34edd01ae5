"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path
from typing import Dict, Any

from denkmal.database import init_database, get_session, open_session
from denkmal.importer import import_dataset
from denkmal.logger import StructuredLogger, get_logger, reset_logger


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Keep the global logger quiet and its files inside tmp_path."""
    reset_logger()
    get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def test_logger(tmp_path) -> StructuredLogger:
    """A private logger whose metrics each test can inspect."""
    return StructuredLogger(
        name="denkmal-test",
        log_dir=tmp_path / "test-logs",
        enable_console=False,
    )


@pytest.fixture
def berlin_dataset() -> Dict[str, Any]:
    """Small monument dataset around Mitte."""
    return {
        "types": [
            {"id": 1, "name": "Baudenkmal"},
            {"id": 2, "name": "Ensemble"},
        ],
        "districts": [
            {"id": 1, "name": "Mitte"},
            {"id": 2, "name": "Charlottenburg-Wilmersdorf"},
        ],
        "sub_districts": [
            {"id": 1, "name": "Tiergarten", "district_id": 1},
        ],
        "participants": [
            {"id": 1, "name": "Carl Gotthard Langhans"},
            {"id": 2, "name": "Karl Friedrich Schinkel"},
        ],
        "notions": [
            {"id": 1, "name": "Stadttor"},
        ],
        "addresses": [
            {"id": 1, "street": "Pariser Platz", "number": "1", "latitude": 52.5163, "longitude": 13.3777},
            {"id": 2, "street": "Unter den Linden", "number": "4", "latitude": 52.5175, "longitude": 13.3955},
            {"id": 3, "street": "Schillerstraße", "number": "10", "latitude": 52.5100, "longitude": 13.3000},
            {"id": 4, "street": "Gendarmenmarkt", "latitude": 52.5138, "longitude": 13.3925},
            {"id": 5, "street": "Bodestraße", "number": "1", "latitude": 52.5200, "longitude": 13.3980},
        ],
        "monuments": [
            {
                "id": 1,
                "name": "Brandenburger Tor",
                "type_id": 1,
                "dating": {"from": "1788-01-01", "to": "1791-12-31"},
                "address_ids": [1],
                "participant_ids": [1],
                "district_ids": [1],
                "sub_district_ids": [1],
                "notion_ids": [1],
            },
            {
                "id": 2,
                "name": "Neue Wache",
                "type_id": 1,
                "dating": {"from": "1816-01-01", "to": "1818-12-31"},
                "address_ids": [2],
                "participant_ids": [2],
                "district_ids": [1],
            },
            {
                "id": 3,
                "name": "Schillertheater",
                "type_id": 1,
                "dating": {"from": "1950-01-01"},
                "address_ids": [3],
                "district_ids": [2],
            },
            {
                "id": 4,
                "name": "Konzerthaus am Gendarmenmarkt",
                "type_id": 1,
                "dating": {"from": "1818-01-01", "to": "1821-12-31"},
                "address_ids": [4],
                "participant_ids": [2],
                "district_ids": [1],
            },
            {
                "id": 5,
                "name": "Ensemble Gendarmenmarkt",
                "type_id": 2,
                "address_ids": [4],
                "district_ids": [1],
            },
            {
                "id": 6,
                "name": "Ägyptisches Museum",
                "type_id": 1,
                "address_ids": [5],
            },
            {
                "id": 7,
                "name": "Neue Wache",
                "type_id": 2,
            },
        ],
    }


@pytest.fixture
def db_path(tmp_path, berlin_dataset) -> Path:
    """Initialized database file loaded with berlin_dataset."""
    path = tmp_path / "denkmal.db"
    init_database(path)
    session = get_session(path)
    import_dataset(session, berlin_dataset)
    session.close()
    return path


@pytest.fixture
def db_session(db_path):
    """Session on the loaded database."""
    session = open_session(db_path)
    yield session
    session.close()
