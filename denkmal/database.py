"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the monument dataset. The dataset is
read-only at query time; a process opens one session at start-up and
hands it to the search service.
"""

from pathlib import Path
from sqlalchemy import (
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    create_engine,
    event,
    inspect,
    text,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from .errors import StorageError

Base = declarative_base()


address_rel = Table(
    "address_rel",
    Base.metadata,
    Column("monument_id", Integer, ForeignKey("monument.id"), primary_key=True),
    Column("address_id", Integer, ForeignKey("address.id"), primary_key=True),
)

participant_rel = Table(
    "participant_rel",
    Base.metadata,
    Column("monument_id", Integer, ForeignKey("monument.id"), primary_key=True),
    Column("participant_id", Integer, ForeignKey("participant.id"), primary_key=True),
)

district_rel = Table(
    "district_rel",
    Base.metadata,
    Column("monument_id", Integer, ForeignKey("monument.id"), primary_key=True),
    Column("district_id", Integer, ForeignKey("district.id"), primary_key=True),
)

sub_district_rel = Table(
    "sub_district_rel",
    Base.metadata,
    Column("monument_id", Integer, ForeignKey("monument.id"), primary_key=True),
    Column("sub_district_id", Integer, ForeignKey("sub_district.id"), primary_key=True),
)

notion_rel = Table(
    "notion_rel",
    Base.metadata,
    Column("monument_id", Integer, ForeignKey("monument.id"), primary_key=True),
    Column("notion_id", Integer, ForeignKey("notion.id"), primary_key=True),
)


class MonumentType(Base):
    """Monument category, e.g. "Baudenkmal" or "Ensemble"."""

    __tablename__ = "type"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)


class Dating(Base):
    """Creation period of a monument. Either bound may be unknown."""

    __tablename__ = "dating"

    id = Column(Integer, primary_key=True)
    date_from = Column(Date, nullable=True)
    date_to = Column(Date, nullable=True)


class Address(Base):
    __tablename__ = "address"

    id = Column(Integer, primary_key=True)
    street = Column(String, nullable=False)
    number = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)


class Participant(Base):
    """Architect, builder or artist involved in a monument."""

    __tablename__ = "participant"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)


class District(Base):
    __tablename__ = "district"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    sub_districts = relationship("SubDistrict", back_populates="district")


class SubDistrict(Base):
    __tablename__ = "sub_district"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    district_id = Column(Integer, ForeignKey("district.id"), nullable=True)

    district = relationship("District", back_populates="sub_districts")


class Notion(Base):
    __tablename__ = "notion"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)


class Monument(Base):
    """Monument model. The searchable entity."""

    __tablename__ = "monument"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type_id = Column(Integer, ForeignKey("type.id"), nullable=True)
    dating_id = Column(Integer, ForeignKey("dating.id"), nullable=True)

    type = relationship("MonumentType")
    creation_period = relationship("Dating")
    addresses = relationship("Address", secondary=address_rel, order_by="Address.id")
    participants = relationship("Participant", secondary=participant_rel, order_by="Participant.id")
    districts = relationship("District", secondary=district_rel, order_by="District.id")
    sub_districts = relationship("SubDistrict", secondary=sub_district_rel, order_by="SubDistrict.id")
    notions = relationship("Notion", secondary=notion_rel, order_by="Notion.id")

    def __repr__(self) -> str:
        return f"Monument(id={self.id!r}, name={self.name!r})"


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_functions(dbapi_connection, connection_record) -> None:
    # SQLite's own lower() only folds ASCII ("Ä" stays "Ä")
    dbapi_connection.create_function("unicode_lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(db_path: Path):
    """
    Create an engine for the SQLite file with the search helpers installed.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy engine
    """
    engine = create_engine(f"sqlite:///{db_path}")
    event.listen(engine, "connect", _register_functions)
    return engine


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_db_engine(db_path)
    Session = sessionmaker(bind=engine)
    return Session()


def open_session(db_path: Path):
    """
    Open the session used for the lifetime of the process.

    Unlike get_session this never creates a database: the file must exist
    and contain the monument schema.

    Args:
        db_path: Path to an initialized SQLite database file

    Returns:
        SQLAlchemy session

    Raises:
        StorageError: If the file is missing, unreadable or not initialized
    """
    if not db_path.exists():
        raise StorageError(f"Database not found: {db_path}")

    session = get_session(db_path)
    try:
        session.execute(text("SELECT 1"))
        if not inspect(session.get_bind()).has_table(Monument.__tablename__):
            raise StorageError(f"Database {db_path} has no monument table. Run 'denkmal init' first.")
    except SQLAlchemyError as e:
        session.close()
        raise StorageError(f"Cannot open database {db_path}: {e}") from e
    except StorageError:
        session.close()
        raise
    return session
