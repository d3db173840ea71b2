"""Database setup and models for Fantasy Map Builder.

This module provides the database connection, models, and utilities for
worlds, maps, locations, custom stamps, travel settings and users, using
SQLAlchemy. Deleting a world removes everything that belongs to it.
"""

import os
import uuid
from datetime import datetime, timezone

from dotenv import load_dotenv
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

load_dotenv()

# Database setup
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fantasy_map.db")

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite only honours ON DELETE CASCADE with foreign keys switched on."""
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class World(Base):
    """Top-level container for maps, custom stamps and travel settings.

    Attributes:
        id: UUID primary key.
        name: Display name.
        description: Free text.
        created_at: When the world was created.
        updated_at: When the world was last changed.
    """

    __tablename__ = "worlds"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    description = Column(Text, default="", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False, index=True)

    maps = relationship(
        "Map", back_populates="world", cascade="all, delete-orphan", passive_deletes=True
    )
    custom_stamps = relationship(
        "CustomStamp",
        back_populates="world",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CustomStamp.created_at",
    )
    travel_settings = relationship(
        "TravelSettingsRecord",
        back_populates="world",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Map(Base):
    """A single map image within a world, with its distance scale.

    Attributes:
        id: UUID primary key.
        world_id: Owning world.
        name: Display name.
        image_data: Data URL of the background image, if uploaded.
        width: Image width in pixels.
        height: Image height in pixels.
        scale_value: Pixels per distance unit.
        scale_unit: Distance unit (miles, km or leagues).
    """

    __tablename__ = "maps"

    id = Column(String(36), primary_key=True, default=new_id)
    world_id = Column(
        String(36), ForeignKey("worlds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(120), nullable=False)
    image_data = Column(Text, nullable=True)
    width = Column(Integer, default=0, nullable=False)
    height = Column(Integer, default=0, nullable=False)
    scale_value = Column(Float, default=1, nullable=False)
    scale_unit = Column(String(20), default="miles", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    world = relationship("World", back_populates="maps")
    locations = relationship(
        "Location",
        back_populates="map",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Location.created_at",
    )

    def to_dict(self, include_image: bool = True):
        data = {
            "id": self.id,
            "world_id": self.world_id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "scale_value": self.scale_value,
            "scale_unit": self.scale_unit,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_image:
            data["image_data"] = self.image_data
        return data


class Location(Base):
    """A stamped marker placed on a map."""

    __tablename__ = "locations"

    id = Column(String(36), primary_key=True, default=new_id)
    map_id = Column(
        String(36), ForeignKey("maps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(120), nullable=False)
    description = Column(Text, default="", nullable=False)
    wiki_link = Column(Text, default="", nullable=False)
    notes = Column(Text, default="", nullable=False)
    stamp_id = Column(String(64), default="pin", nullable=False)
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    map = relationship("Map", back_populates="locations")

    def to_dict(self):
        return {
            "id": self.id,
            "map_id": self.map_id,
            "name": self.name,
            "description": self.description,
            "wiki_link": self.wiki_link,
            "notes": self.notes,
            "stamp_id": self.stamp_id,
            "x": self.x,
            "y": self.y,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class CustomStamp(Base):
    """A world-specific stamp added on top of the default catalog."""

    __tablename__ = "custom_stamps"

    id = Column(String(36), primary_key=True, default=new_id)
    world_id = Column(
        String(36), ForeignKey("worlds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    icon = Column(String(32), nullable=False)
    name = Column(String(120), nullable=False)
    category = Column(String(64), default="custom", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    world = relationship("World", back_populates="custom_stamps")

    def to_dict(self):
        return {
            "id": self.id,
            "world_id": self.world_id,
            "icon": self.icon,
            "name": self.name,
            "category": self.category,
            "created_at": _iso(self.created_at),
        }


class TravelSettingsRecord(Base):
    """Per-world travel speeds (mph) and travel hours per day."""

    __tablename__ = "travel_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    world_id = Column(
        String(36),
        ForeignKey("worlds.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    walking_speed = Column(Float, default=3, nullable=False)
    horse_speed = Column(Float, default=8, nullable=False)
    wagon_speed = Column(Float, default=4, nullable=False)
    hours_per_day = Column(Integer, default=8, nullable=False)

    world = relationship("World", back_populates="travel_settings")

    def to_dict(self):
        return {
            "id": self.id,
            "world_id": self.world_id,
            "walking_speed": self.walking_speed,
            "horse_speed": self.horse_speed,
            "wagon_speed": self.wagon_speed,
            "hours_per_day": self.hours_per_day,
        }


class User(Base):
    """Account used for session login."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {"id": self.id, "username": self.username}


def get_db():
    """Dependency for getting database session.

    Yields:
        Database session that will be closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize the database by creating all tables."""
    Base.metadata.create_all(bind=engine)
