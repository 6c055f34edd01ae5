"""
Tests for dataset validation and import.
"""

import copy
import pytest

from denkmal.database import Monument, init_database, get_session
from denkmal.errors import DatasetError, StorageError
from denkmal.importer import import_dataset, validate_dataset


@pytest.fixture
def session(tmp_path):
    db_path = tmp_path / "import.db"
    init_database(db_path)
    session = get_session(db_path)
    yield session
    session.close()


class TestValidateDataset:
    """Test validation messages."""

    def test_valid_dataset(self, berlin_dataset):
        assert validate_dataset(berlin_dataset) == []

    def test_empty_document_is_valid(self):
        assert validate_dataset({}) == []

    def test_not_an_object(self):
        assert validate_dataset([]) == ["Dataset must be a JSON object"]

    def test_section_must_be_list(self):
        errors = validate_dataset({"monuments": {"id": 1}})
        assert errors == ["Section 'monuments' must be a list"]

    def test_missing_name(self):
        errors = validate_dataset({"monuments": [{"id": 1, "name": "  "}]})
        assert any("name" in e for e in errors)

    def test_non_integer_id(self):
        errors = validate_dataset({"types": [{"id": "1", "name": "Baudenkmal"}]})
        assert any("'id' must be an integer" in e for e in errors)

    def test_duplicate_id(self):
        data = {"types": [{"id": 1, "name": "A"}, {"id": 1, "name": "B"}]}
        assert any("duplicate id 1" in e for e in validate_dataset(data))

    def test_unknown_field(self):
        data = {"addresses": [{"id": 1, "street": "Pariser Platz", "zip": "10117"}]}
        assert any("unknown field(s) zip" in e for e in validate_dataset(data))

    def test_unknown_reference(self, berlin_dataset):
        data = copy.deepcopy(berlin_dataset)
        data["monuments"][0]["address_ids"] = [99]
        assert validate_dataset(data) == ["monuments[0]: unknown address_id 99"]

    def test_unknown_type(self, berlin_dataset):
        data = copy.deepcopy(berlin_dataset)
        data["monuments"][0]["type_id"] = 42
        assert validate_dataset(data) == ["monuments[0]: unknown type_id 42"]

    def test_unknown_district_of_sub_district(self, berlin_dataset):
        data = copy.deepcopy(berlin_dataset)
        data["sub_districts"][0]["district_id"] = 9
        assert validate_dataset(data) == ["sub_districts[0]: unknown district_id 9"]

    def test_bad_date(self, berlin_dataset):
        data = copy.deepcopy(berlin_dataset)
        data["monuments"][0]["dating"] = {"from": "1788"}
        assert any("ISO date" in e for e in validate_dataset(data))

    def test_duplicate_reference(self):
        """A monument listing the same address twice is rejected before import."""
        data = {
            "addresses": [{"id": 1, "street": "Pariser Platz"}],
            "monuments": [{"id": 1, "name": "Brandenburger Tor", "address_ids": [1, 1]}],
        }
        assert validate_dataset(data) == ["monuments[0]: duplicate address_id 1"]

    def test_duplicate_reference_raises_dataset_error(self, session):
        """Repeated ids surface as DatasetError and nothing is written."""
        data = {
            "participants": [{"id": 1, "name": "Karl Friedrich Schinkel"}],
            "monuments": [{"id": 1, "name": "Neue Wache", "participant_ids": [1, 1]}],
        }
        with pytest.raises(DatasetError):
            import_dataset(session, data)
        assert session.query(Monument).count() == 0

    def test_boolean_reference_rejected(self, berlin_dataset):
        """JSON true is not a reference to id 1."""
        data = copy.deepcopy(berlin_dataset)
        data["monuments"][0]["address_ids"] = [True]
        data["monuments"][0]["type_id"] = True
        assert validate_dataset(data) == [
            "monuments[0]: unknown type_id True",
            "monuments[0]: unknown address_id True",
        ]

    def test_boolean_district_rejected(self, berlin_dataset):
        data = copy.deepcopy(berlin_dataset)
        data["sub_districts"][0]["district_id"] = True
        assert validate_dataset(data) == ["sub_districts[0]: unknown district_id True"]

    def test_bad_coordinate(self, berlin_dataset):
        data = copy.deepcopy(berlin_dataset)
        data["addresses"][0]["latitude"] = "52.5"
        assert validate_dataset(data) == ["addresses[0]: 'latitude' must be a number"]


class TestImportDataset:
    """Test inserting a dataset."""

    def test_import_counts(self, session, berlin_dataset):
        counts = import_dataset(session, berlin_dataset)

        assert counts["monuments"] == 7
        assert counts["addresses"] == 5
        assert counts["datings"] == 4
        assert session.query(Monument).count() == 7

    def test_import_links_relations(self, session, berlin_dataset):
        import_dataset(session, berlin_dataset)

        wache = session.get(Monument, 2)
        assert [a.street for a in wache.addresses] == ["Unter den Linden"]
        assert [p.name for p in wache.participants] == ["Karl Friedrich Schinkel"]

    def test_open_ended_dating(self, session, berlin_dataset):
        import_dataset(session, berlin_dataset)

        period = session.get(Monument, 3).creation_period
        assert period.date_to is None

    def test_invalid_dataset_writes_nothing(self, session):
        with pytest.raises(DatasetError) as exc_info:
            import_dataset(session, {"monuments": [{"id": 1}]})

        assert exc_info.value.errors
        assert session.query(Monument).count() == 0

    def test_reimport_fails_with_storage_error(self, session, berlin_dataset):
        """Importing the same ids twice violates primary keys."""
        import_dataset(session, berlin_dataset)

        with pytest.raises(StorageError):
            import_dataset(session, berlin_dataset)

        assert session.query(Monument).count() == 7
