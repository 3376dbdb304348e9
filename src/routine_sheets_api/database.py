"""
Routine store schema and engine setup.

Tables:
- users
- muscle_groups / exercises: catalogues shared by every routine
- routines: one row per (user, week, day)
- routine_muscle_groups: groups trained in a routine
- routine_exercises: one row per prescribed set
"""
import logging
from datetime import datetime
from functools import lru_cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from routine_sheets_api.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False, default="")
    email = Column(String, nullable=True, unique=True)
    is_moderator = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    routines = relationship("Routine", back_populates="user", cascade="all, delete-orphan")


class MuscleGroupRecord(Base):
    __tablename__ = "muscle_groups"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class ExerciseRecord(Base):
    __tablename__ = "exercises"
    __table_args__ = (UniqueConstraint("name", "variant"),)

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    variant = Column(String, nullable=False, default="")
    muscle_group_id = Column(Integer, ForeignKey("muscle_groups.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Routine(Base):
    __tablename__ = "routines"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    week_number = Column(Integer, nullable=False, index=True)
    day_name = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="routines")
    muscle_groups = relationship(
        "RoutineMuscleGroup", back_populates="routine", cascade="all, delete-orphan"
    )
    exercises = relationship(
        "RoutineExercise",
        back_populates="routine",
        cascade="all, delete-orphan",
        order_by="RoutineExercise.position",
    )


class RoutineMuscleGroup(Base):
    __tablename__ = "routine_muscle_groups"

    routine_id = Column(Integer, ForeignKey("routines.id"), primary_key=True)
    muscle_group_id = Column(Integer, ForeignKey("muscle_groups.id"), primary_key=True)

    routine = relationship("Routine", back_populates="muscle_groups")
    muscle_group = relationship("MuscleGroupRecord")


class RoutineExercise(Base):
    __tablename__ = "routine_exercises"

    id = Column(Integer, primary_key=True)
    routine_id = Column(Integer, ForeignKey("routines.id"), nullable=False, index=True)
    muscle_group_id = Column(Integer, ForeignKey("muscle_groups.id"), nullable=False)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    series = Column(Integer, nullable=False)
    weight = Column(Float, nullable=False, default=0)
    reps = Column(String, nullable=False, default="")
    rest_seconds = Column(Integer, nullable=False, default=0)
    progress = Column(Float, nullable=False, default=0)
    notes = Column(String, nullable=False, default="")

    routine = relationship("Routine", back_populates="exercises")
    muscle_group = relationship("MuscleGroupRecord")
    exercise = relationship("ExerciseRecord")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def make_engine(url: str) -> Engine:
    """Create an engine and make sure the schema exists."""
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # in-memory databases live per connection, so share a single one
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)
    Base.metadata.create_all(engine)
    logger.info(f"Routine store ready at {engine.url.render_as_string(hide_password=True)}")
    return engine


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Session factory bound to settings.DATABASE_URL (created once)."""
    return sessionmaker(bind=make_engine(settings.DATABASE_URL), expire_on_commit=False)
