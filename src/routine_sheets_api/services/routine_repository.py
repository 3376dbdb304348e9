"""
SQLAlchemy routine store.

Persistence side of the import/export flows:
- replace_week: replace the weeks a parsed routine covers, inside one
  transaction
- get_week: read a stored week back in the shape the sheet writer expects
- upload_stats: per (week, day) counts for the upload screen
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from routine_sheets_api.database import (
    ExerciseRecord,
    MuscleGroupRecord,
    Routine,
    RoutineExercise,
    RoutineMuscleGroup,
    User,
)
from routine_sheets_api.parsers.models import (
    DAYS,
    Exercise,
    ExerciseSet,
    MuscleGroup,
    ParsedRoutine,
    RoutineDay,
)

logger = logging.getLogger(__name__)


class RoutineStoreError(Exception):
    """Base error for routine store failures."""


class UserNotFoundError(RoutineStoreError):
    """The target user does not exist."""


class RoutineNotFoundError(RoutineStoreError):
    """Nothing stored for the requested user/week."""


@dataclass
class ReplaceWeekResult:
    """Outcome of replacing stored weeks."""
    user_id: int
    week_number: int  # first week written
    weeks: List[int] = field(default_factory=list)
    created: List[Dict[str, Any]] = field(default_factory=list)
    replaced: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def operation_type(self) -> str:
        return "replace" if self.replaced else "create"


class RoutineRepository:
    """
    Routine persistence over a SQLAlchemy session factory.

    The session factory is injected so tests can bind an in-memory engine.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def add_user(
        self,
        username: str,
        name: str = "",
        email: Optional[str] = None,
        is_moderator: bool = False,
    ) -> int:
        """Create a user and return its id."""
        with self._session_factory() as session, session.begin():
            user = User(username=username, name=name or username, email=email, is_moderator=is_moderator)
            session.add(user)
            session.flush()
            return user.id

    def get_user_name(self, user_id: int) -> Optional[str]:
        """Display name of a user, None if the user does not exist."""
        with self._session_factory() as session:
            user = session.get(User, user_id)
            if user is None:
                return None
            return user.name or user.username

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def replace_week(
        self,
        user_id: int,
        routine: ParsedRoutine,
        week_number: Optional[int] = None,
    ) -> ReplaceWeekResult:
        """
        Replace the user's stored routines with the parsed routine.

        Without an explicit week each day is stored under its own
        day.week_number (the week read from its sheet name), and every week
        the routine touches is replaced. With an explicit week all days go
        to that week.

        Args:
            user_id: Owner of the routines
            routine: Parsed routine to store
            week_number: Explicit week, overrides every day's week

        Returns:
            ReplaceWeekResult with created and replaced routines

        Raises:
            UserNotFoundError: If the user does not exist
        """
        day_weeks = [week_number or day.week_number for day in routine.days]
        weeks = sorted(set(day_weeks)) or [week_number or routine.week_number]
        result = ReplaceWeekResult(user_id=user_id, week_number=weeks[0], weeks=weeks)

        with self._session_factory() as session, session.begin():
            if session.get(User, user_id) is None:
                raise UserNotFoundError(f"User {user_id} not found")

            existing = session.scalars(
                select(Routine)
                .where(Routine.user_id == user_id, Routine.week_number.in_(weeks))
                .order_by(Routine.id)
            ).all()
            for old in existing:
                result.replaced.append({"id": old.id, "day": old.day_name, "week_number": old.week_number})
                session.delete(old)
            session.flush()

            groups: Dict[str, MuscleGroupRecord] = {}
            exercises: Dict[tuple, ExerciseRecord] = {}

            for day, week in zip(routine.days, day_weeks):
                stored = Routine(user_id=user_id, week_number=week, day_name=day.day, is_active=True)
                session.add(stored)

                position = 0
                linked = set()
                for group in day.muscle_groups:
                    group_record = self._group_record(session, groups, group.name)
                    if group_record.id not in linked:
                        stored.muscle_groups.append(RoutineMuscleGroup(muscle_group_id=group_record.id))
                        linked.add(group_record.id)

                    for exercise in group.exercises:
                        exercise_record = self._exercise_record(session, exercises, exercise, group_record)
                        for exercise_set in exercise.sets:
                            stored.exercises.append(
                                RoutineExercise(
                                    muscle_group_id=group_record.id,
                                    exercise_id=exercise_record.id,
                                    position=position,
                                    series=exercise_set.series,
                                    weight=exercise_set.weight,
                                    reps=exercise_set.reps,
                                    rest_seconds=exercise_set.rest,
                                    progress=exercise_set.progress,
                                )
                            )
                            position += 1

                session.flush()
                result.created.append({"id": stored.id, "day": day.day, "week_number": week})

        logger.info(
            f"Stored week(s) {weeks} for user {user_id}: "
            f"{len(result.replaced)} replaced, {len(result.created)} created"
        )
        return result

    @staticmethod
    def _group_record(session: Session, cache: Dict[str, MuscleGroupRecord], name: str) -> MuscleGroupRecord:
        record = cache.get(name)
        if record is None:
            record = session.scalars(select(MuscleGroupRecord).where(MuscleGroupRecord.name == name)).first()
            if record is None:
                record = MuscleGroupRecord(name=name)
                session.add(record)
                session.flush()
            cache[name] = record
        return record

    @staticmethod
    def _exercise_record(
        session: Session,
        cache: Dict[tuple, ExerciseRecord],
        exercise: Exercise,
        group: MuscleGroupRecord,
    ) -> ExerciseRecord:
        key = (exercise.name, exercise.variant)
        record = cache.get(key)
        if record is None:
            record = session.scalars(
                select(ExerciseRecord).where(
                    ExerciseRecord.name == exercise.name,
                    ExerciseRecord.variant == exercise.variant,
                )
            ).first()
            if record is None:
                record = ExerciseRecord(name=exercise.name, variant=exercise.variant, muscle_group_id=group.id)
                session.add(record)
                session.flush()
            cache[key] = record
        return record

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def get_week(self, user_id: int, week_number: int) -> List[RoutineDay]:
        """
        Stored routines of a week as RoutineDay values, in canonical day order.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        with self._session_factory() as session:
            if session.get(User, user_id) is None:
                raise UserNotFoundError(f"User {user_id} not found")

            routines = session.scalars(
                select(Routine)
                .where(
                    Routine.user_id == user_id,
                    Routine.week_number == week_number,
                    Routine.is_active.is_(True),
                )
                .order_by(Routine.id)
            ).all()

            days = []
            for routine in sorted(routines, key=lambda r: _day_order(r.day_name)):
                muscle_groups = _muscle_groups_from_rows(routine.exercises)
                if muscle_groups:
                    days.append(
                        RoutineDay(day=routine.day_name, week_number=week_number, muscle_groups=muscle_groups)
                    )
            return days

    def require_week(self, user_id: int, week_number: int) -> List[RoutineDay]:
        """Like get_week, but an empty week raises RoutineNotFoundError."""
        days = self.get_week(user_id, week_number)
        if not days:
            raise RoutineNotFoundError(f"No routines for user {user_id} in week {week_number}")
        return days

    def upload_stats(self, user_id: int) -> Dict[str, Any]:
        """Routine counts per (week, day) plus the user's total."""
        with self._session_factory() as session:
            rows = session.execute(
                select(
                    Routine.week_number,
                    Routine.day_name,
                    func.count(Routine.id),
                    func.max(Routine.created_at),
                )
                .where(Routine.user_id == user_id)
                .group_by(Routine.week_number, Routine.day_name)
                .order_by(Routine.week_number, Routine.day_name)
            ).all()

            return {
                "user_id": user_id,
                "total_routines": sum(count for _, _, count, _ in rows),
                "routines_by_week_and_day": [
                    {
                        "week_number": week,
                        "day_name": day,
                        "routine_count": count,
                        "last_upload": last.isoformat() if last else None,
                    }
                    for week, day, count, last in rows
                ],
            }


def _day_order(day_name: str) -> int:
    return DAYS.index(day_name) if day_name in DAYS else len(DAYS)


def _muscle_groups_from_rows(rows: List[RoutineExercise]) -> List[MuscleGroup]:
    """Rebuild groups/exercises from set rows; consecutive rows share a group or exercise."""
    groups: List[MuscleGroup] = []
    last_group_id = None
    last_exercise_id = None

    for row in rows:
        if row.muscle_group_id != last_group_id:
            groups.append(MuscleGroup(name=row.muscle_group.name))
            last_group_id = row.muscle_group_id
            last_exercise_id = None
        group = groups[-1]
        if row.exercise_id != last_exercise_id:
            group.exercises.append(Exercise(name=row.exercise.name, variant=row.exercise.variant or ""))
            last_exercise_id = row.exercise_id
        group.exercises[-1].sets.append(
            ExerciseSet(
                series=row.series,
                weight=row.weight,
                reps=row.reps,
                rest=row.rest_seconds,
                progress=row.progress,
            )
        )
    return groups
