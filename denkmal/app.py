import argparse
import json
from pathlib import Path

from . import __version__
from .config import Settings
from .database import get_session, init_database, open_session
from .env import load_env
from .errors import ConfigError, DatasetError, StorageError
from .importer import import_dataset, validate_dataset
from .logger import get_logger
from .matchers import FACETS
from .repository import MonumentRepository
from .search import SearchService


def _db_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.db) if args.db else settings.db_path


def _open(args: argparse.Namespace, settings: Settings):
    try:
        return open_session(_db_path(args, settings))
    except StorageError as e:
        raise SystemExit(str(e))


def cmd_init(args: argparse.Namespace, settings: Settings) -> None:
    db_path = _db_path(args, settings)
    init_database(db_path)
    print(f"Initialized {db_path}")


def _print_invalid(errors) -> None:
    print("Invalid:")
    for err in errors:
        print(f" - {err}")
    raise SystemExit(2)


def cmd_import(args: argparse.Namespace, settings: Settings) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")

    # Checked before init so a rejected document leaves no database behind
    errors = validate_dataset(data)
    if errors:
        _print_invalid(errors)

    db_path = _db_path(args, settings)
    init_database(db_path)
    session = get_session(db_path)
    try:
        counts = import_dataset(session, data)
    except DatasetError as e:
        _print_invalid(e.errors)
    except StorageError as e:
        raise SystemExit(str(e))
    finally:
        session.close()
    print("Imported: " + ", ".join(f"{k}={v}" for k, v in counts.items()))


def cmd_search(args: argparse.Namespace, settings: Settings) -> None:
    session = _open(args, settings)
    try:
        service = SearchService(session, settings=settings)
        results = service.search(args.query)
        available = service.facet_availability()
    except StorageError as e:
        raise SystemExit(f"Search failed: {e}")
    finally:
        session.close()

    for facet in FACETS:
        ranked = results[facet]
        print(f"{facet}:")
        if not available[facet]:
            print("  (disabled)")
            continue
        if not ranked:
            print("  no matches")
            continue
        for match_score, monument in ranked[: args.limit]:
            print(f"  {match_score:.3f}  {monument.name} (id {monument.id})")


def cmd_districts(args: argparse.Namespace, settings: Settings) -> None:
    session = _open(args, settings)
    try:
        for district in MonumentRepository(session).all_districts():
            print(f"{district.id}: {district.name}")
    finally:
        session.close()


def cmd_types(args: argparse.Namespace, settings: Settings) -> None:
    session = _open(args, settings)
    try:
        for monument_type in MonumentRepository(session).all_types():
            print(f"{monument_type.id}: {monument_type.name}")
    finally:
        session.close()


def cmd_area(args: argparse.Namespace, settings: Settings) -> None:
    session = _open(args, settings)
    try:
        monuments = MonumentRepository(session).monuments_in_area(
            args.lat, args.lon, args.lat_delta, args.lon_delta
        )
        if not monuments:
            print("No monuments in area.")
            return
        for monument in monuments:
            streets = ", ".join(
                " ".join(p for p in (a.street, a.number) if p) for a in monument.addresses
            )
            print(f"{monument.id}: {monument.name} [{streets}]")
    finally:
        session.close()


def cmd_dates(args: argparse.Namespace, settings: Settings) -> None:
    session = _open(args, settings)
    try:
        repository = MonumentRepository(session)
        earliest, latest = repository.min_date(), repository.max_date()
    finally:
        session.close()
    print(f"Earliest: {earliest.isoformat() if earliest else 'unknown'}")
    print(f"Latest: {latest.isoformat() if latest else 'unknown'}")


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {n}")
    return n


def main(argv=None):
    # Load .env if present (DENKMAL_DB_PATH, DENKMAL_LOG_LEVEL, ...)
    load_env()
    parser = argparse.ArgumentParser(prog="denkmal", description="Search Berlin's historical monuments")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: $DENKMAL_DB_PATH or data/denkmal.db)")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init", help="Create an empty database with the monument schema")
    ini.set_defaults(func=cmd_init)

    imp = subparsers.add_parser("import", help="Import a JSON dataset into the database")
    imp.add_argument("--input", required=True, help="Path to dataset JSON")
    imp.set_defaults(func=cmd_import)

    sea = subparsers.add_parser("search", help="Ranked search by name, location and participant")
    sea.add_argument("query", help="Search words separated by spaces. Example: \"Brandenburger Tor\"")
    sea.add_argument("--limit", type=_non_negative_int, default=10, help="Results shown per facet (default 10)")
    sea.set_defaults(func=cmd_search)

    dis = subparsers.add_parser("districts", help="List all districts")
    dis.set_defaults(func=cmd_districts)

    typ = subparsers.add_parser("types", help="List all monument types")
    typ.set_defaults(func=cmd_types)

    are = subparsers.add_parser("area", help="List monuments inside a bounding box")
    are.add_argument("--lat", type=float, required=True, help="Latitude of the box centre")
    are.add_argument("--lon", type=float, required=True, help="Longitude of the box centre")
    are.add_argument("--lat-delta", type=float, default=0.001, help="Half height in degrees (default 0.001)")
    are.add_argument("--lon-delta", type=float, default=0.001, help="Half width in degrees (default 0.001)")
    are.set_defaults(func=cmd_area)

    dat = subparsers.add_parser("dates", help="Show the earliest and latest known dates")
    dat.set_defaults(func=cmd_dates)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            settings = Settings.from_env()
        except ConfigError as e:
            raise SystemExit(str(e))
        get_logger(level=settings.log_level, log_dir=settings.log_dir)
        args.func(args, settings)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
