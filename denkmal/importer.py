"""
Import a monument dataset from a JSON document.

Document layout (all sections optional lists):

    {
      "types":         [{"id": 1, "name": "Baudenkmal"}],
      "districts":     [{"id": 1, "name": "Mitte"}],
      "sub_districts": [{"id": 1, "name": "Tiergarten", "district_id": 1}],
      "participants":  [{"id": 1, "name": "Carl Gotthard Langhans"}],
      "notions":       [{"id": 1, "name": "Stadttor"}],
      "addresses":     [{"id": 1, "street": "Pariser Platz", "number": "1",
                         "latitude": 52.5163, "longitude": 13.3777}],
      "monuments":     [{"id": 1, "name": "Brandenburger Tor", "type_id": 1,
                         "dating": {"from": "1788-01-01", "to": "1791-12-31"},
                         "address_ids": [1], "participant_ids": [1],
                         "district_ids": [1], "sub_district_ids": [1],
                         "notion_ids": [1]}]
    }
"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .database import (
    Address,
    Dating,
    District,
    Monument,
    MonumentType,
    Notion,
    Participant,
    SubDistrict,
)
from .errors import DatasetError, StorageError
from .logger import get_logger

# section -> (field holding the text, model)
CATALOG_SECTIONS = {
    "types": ("name", MonumentType),
    "districts": ("name", District),
    "sub_districts": ("name", SubDistrict),
    "participants": ("name", Participant),
    "notions": ("name", Notion),
    "addresses": ("street", Address),
}

# monument field -> referenced section
REFERENCE_FIELDS = {
    "address_ids": "addresses",
    "participant_ids": "participants",
    "district_ids": "districts",
    "sub_district_ids": "sub_districts",
    "notion_ids": "notions",
}

MONUMENT_FIELDS = {"id", "name", "type_id", "dating", *REFERENCE_FIELDS}


def _columns(model) -> set:
    return {c.name for c in model.__table__.columns}


def _is_ref(v: Any, known: set) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v in known


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _parse_date(v: Optional[str]) -> Optional[date]:
    return date.fromisoformat(v) if v else None


def _section_ids(data: Dict[str, Any], section: str) -> set:
    return {r.get("id") for r in data.get(section) or [] if isinstance(r, dict)}


def _validate_records(data: Dict[str, Any], section: str, text_field: str, allowed: set) -> List[str]:
    errors: List[str] = []
    records = data.get(section, [])
    if not isinstance(records, list):
        return [f"Section '{section}' must be a list"]

    seen = set()
    for i, record in enumerate(records):
        where = f"{section}[{i}]"
        if not isinstance(record, dict):
            errors.append(f"{where} must be an object")
            continue
        rid = record.get("id")
        if not isinstance(rid, int) or isinstance(rid, bool):
            errors.append(f"{where}: 'id' must be an integer")
        elif rid in seen:
            errors.append(f"{where}: duplicate id {rid}")
        else:
            seen.add(rid)
        if not _is_non_empty_str(record.get(text_field)):
            errors.append(f"{where}: '{text_field}' must be a non-empty string")
        unknown = sorted(set(record) - allowed)
        if unknown:
            errors.append(f"{where}: unknown field(s) {', '.join(unknown)}")
    return errors


def validate_dataset(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Dataset must be a JSON object"]

    errors: List[str] = []
    for section, (text_field, model) in CATALOG_SECTIONS.items():
        errors.extend(_validate_records(data, section, text_field, _columns(model)))
    errors.extend(_validate_records(data, "monuments", "name", MONUMENT_FIELDS))
    if errors:
        return errors

    type_ids = _section_ids(data, "types")
    district_ids = _section_ids(data, "districts")

    for i, sub in enumerate(data.get("sub_districts") or []):
        ref = sub.get("district_id")
        if ref is not None and not _is_ref(ref, district_ids):
            errors.append(f"sub_districts[{i}]: unknown district_id {ref}")

    for i, address in enumerate(data.get("addresses") or []):
        for coord in ("latitude", "longitude"):
            v = address.get(coord)
            if v is not None and (not isinstance(v, (int, float)) or isinstance(v, bool)):
                errors.append(f"addresses[{i}]: '{coord}' must be a number")

    for i, monument in enumerate(data.get("monuments") or []):
        where = f"monuments[{i}]"
        type_id = monument.get("type_id")
        if type_id is not None and not _is_ref(type_id, type_ids):
            errors.append(f"{where}: unknown type_id {type_id}")

        for field, section in REFERENCE_FIELDS.items():
            refs = monument.get(field, [])
            if not isinstance(refs, list):
                errors.append(f"{where}: '{field}' must be a list")
                continue
            known = _section_ids(data, section)
            listed = set()
            for ref in refs:
                if not _is_ref(ref, known):
                    errors.append(f"{where}: unknown {field[:-1]} {ref}")
                elif ref in listed:
                    errors.append(f"{where}: duplicate {field[:-1]} {ref}")
                else:
                    listed.add(ref)

        dating = monument.get("dating")
        if dating is not None:
            if not isinstance(dating, dict):
                errors.append(f"{where}: 'dating' must be an object")
                continue
            for bound in ("from", "to"):
                try:
                    _parse_date(dating.get(bound))
                except (TypeError, ValueError):
                    errors.append(f"{where}: dating '{bound}' must be an ISO date (YYYY-MM-DD)")

    return errors


def import_dataset(session, data: Dict[str, Any]) -> Dict[str, int]:
    """
    Validate a dataset document and insert it in one transaction.

    Args:
        session: SQLAlchemy session on an initialized database
        data: Parsed JSON document

    Returns:
        Dict of section name -> number of records inserted

    Raises:
        DatasetError: If the document fails validation (nothing is written)
        StorageError: If the insert fails, e.g. ids already present
    """
    logger = get_logger()
    errors = validate_dataset(data)
    if errors:
        logger.warning("Dataset rejected", errors=len(errors), first_error=errors[0])
        raise DatasetError(errors)

    objects: Dict[str, Dict[int, Any]] = {}
    for section, (_, model) in CATALOG_SECTIONS.items():
        objects[section] = {}
        for record in data.get(section) or []:
            obj = model(**record)
            objects[section][obj.id] = obj
            session.add(obj)

    datings = 0
    for record in data.get("monuments") or []:
        monument = Monument(
            id=record["id"],
            name=record["name"],
            type=objects["types"].get(record.get("type_id")),
        )
        dating = record.get("dating")
        if dating:
            monument.creation_period = Dating(
                date_from=_parse_date(dating.get("from")),
                date_to=_parse_date(dating.get("to")),
            )
            datings += 1
        monument.addresses = [objects["addresses"][r] for r in record.get("address_ids", [])]
        monument.participants = [objects["participants"][r] for r in record.get("participant_ids", [])]
        monument.districts = [objects["districts"][r] for r in record.get("district_ids", [])]
        monument.sub_districts = [objects["sub_districts"][r] for r in record.get("sub_district_ids", [])]
        monument.notions = [objects["notions"][r] for r in record.get("notion_ids", [])]
        session.add(monument)

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Dataset import failed", error=str(e))
        raise StorageError(f"Import failed: {e}") from e

    counts = {section: len(objs) for section, objs in objects.items()}
    counts["monuments"] = len(data.get("monuments") or [])
    counts["datings"] = datings
    logger.info("Dataset imported", **counts)
    return counts
