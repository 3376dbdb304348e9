"""Tests for the SQLAlchemy routine store."""
import pytest

from routine_sheets_api.parsers.models import (
    Exercise,
    ExerciseSet,
    MuscleGroup,
    ParsedRoutine,
    RoutineDay,
)
from routine_sheets_api.services.routine_repository import (
    RoutineNotFoundError,
    UserNotFoundError,
)


def _routine(week=1, days=("Lunes", "Miércoles")):
    return ParsedRoutine(
        user_name="Juan Perez",
        week_number=week,
        days=[
            RoutineDay(
                day=day,
                week_number=week,
                muscle_groups=[
                    MuscleGroup(
                        name="Pecho",
                        exercises=[
                            Exercise(
                                name="Press Banca",
                                variant="Plano",
                                sets=[
                                    ExerciseSet(series=1, weight=80, reps="10", rest=90),
                                    ExerciseSet(series=2, weight=82.5, reps="8", rest=90, progress=5),
                                ],
                            )
                        ],
                    ),
                    MuscleGroup(
                        name="Espalda",
                        exercises=[Exercise(name="Remo", sets=[ExerciseSet(series=1, weight=60, reps="12")])],
                    ),
                ],
            )
            for day in days
        ],
    )


class TestReplaceWeek:
    def test_first_upload_creates(self, repository, user_id):
        result = repository.replace_week(user_id, _routine())

        assert result.operation_type == "create"
        assert result.week_number == 1
        assert [r["day"] for r in result.created] == ["Lunes", "Miércoles"]
        assert result.replaced == []

    def test_second_upload_replaces(self, repository, user_id):
        first = repository.replace_week(user_id, _routine())
        second = repository.replace_week(user_id, _routine(days=("Viernes",)))

        assert second.operation_type == "replace"
        assert {r["id"] for r in second.replaced} == {r["id"] for r in first.created}
        assert [d.day for d in repository.get_week(user_id, 1)] == ["Viernes"]

    def test_other_weeks_untouched(self, repository, user_id):
        repository.replace_week(user_id, _routine(week=1))
        repository.replace_week(user_id, _routine(week=2, days=("Jueves",)))

        assert [d.day for d in repository.get_week(user_id, 1)] == ["Lunes", "Miércoles"]
        assert [d.day for d in repository.get_week(user_id, 2)] == ["Jueves"]

    def test_explicit_week_overrides_routine_week(self, repository, user_id):
        result = repository.replace_week(user_id, _routine(week=1), week_number=5)

        assert result.week_number == 5
        assert all(r["week_number"] == 5 for r in result.created)
        assert repository.get_week(user_id, 1) == []
        assert len(repository.get_week(user_id, 5)) == 2

    def test_days_stored_under_their_own_week(self, repository, user_id):
        routine = _routine(week=1, days=("Lunes", "Martes"))
        routine.days[0].week_number = 2
        routine.days[1].week_number = 3

        result = repository.replace_week(user_id, routine)

        assert result.weeks == [2, 3]
        assert [(r["day"], r["week_number"]) for r in result.created] == [("Lunes", 2), ("Martes", 3)]
        assert repository.get_week(user_id, 1) == []
        assert [d.day for d in repository.get_week(user_id, 2)] == ["Lunes"]
        assert [d.day for d in repository.get_week(user_id, 3)] == ["Martes"]

    def test_only_weeks_in_routine_are_replaced(self, repository, user_id):
        repository.replace_week(user_id, _routine(week=1))
        repository.replace_week(user_id, _routine(week=2, days=("Jueves",)))
        routine = _routine(week=1, days=("Sábado",))
        routine.days[0].week_number = 2

        result = repository.replace_week(user_id, routine)

        assert [(r["day"], r["week_number"]) for r in result.replaced] == [("Jueves", 2)]
        assert [d.day for d in repository.get_week(user_id, 1)] == ["Lunes", "Miércoles"]
        assert [d.day for d in repository.get_week(user_id, 2)] == ["Sábado"]

    def test_unknown_user(self, repository):
        with pytest.raises(UserNotFoundError):
            repository.replace_week(999, _routine())

    def test_failed_replace_keeps_previous_week(self, repository, user_id, monkeypatch):
        repository.replace_week(user_id, _routine())

        def boom(*args, **kwargs):
            raise RuntimeError("catalogue unavailable")

        monkeypatch.setattr(repository, "_exercise_record", boom)
        with pytest.raises(RuntimeError):
            repository.replace_week(user_id, _routine(days=("Viernes",)))

        assert [d.day for d in repository.get_week(user_id, 1)] == ["Lunes", "Miércoles"]


class TestGetWeek:
    def test_round_trips_routine_shape(self, repository, user_id):
        routine = _routine()
        repository.replace_week(user_id, routine)

        days = repository.get_week(user_id, 1)

        assert [d.model_dump() for d in days] == [d.model_dump() for d in routine.days]

    def test_days_in_canonical_order(self, repository, user_id):
        repository.replace_week(user_id, _routine(days=("Domingo", "Martes", "Lunes")))

        assert [d.day for d in repository.get_week(user_id, 1)] == ["Lunes", "Martes", "Domingo"]

    def test_unknown_user(self, repository):
        with pytest.raises(UserNotFoundError):
            repository.get_week(999, 1)

    def test_require_week_raises_when_empty(self, repository, user_id):
        with pytest.raises(RoutineNotFoundError):
            repository.require_week(user_id, 3)

    def test_user_name(self, repository, user_id):
        assert repository.get_user_name(user_id) == "Juan Perez"
        assert repository.get_user_name(999) is None


class TestUploadStats:
    def test_counts_by_week_and_day(self, repository, user_id):
        repository.replace_week(user_id, _routine(week=1))
        repository.replace_week(user_id, _routine(week=2, days=("Jueves",)))

        stats = repository.upload_stats(user_id)

        assert stats["user_id"] == user_id
        assert stats["total_routines"] == 3
        entries = [(e["week_number"], e["day_name"], e["routine_count"]) for e in stats["routines_by_week_and_day"]]
        assert sorted(entries) == [(1, "Lunes", 1), (1, "Miércoles", 1), (2, "Jueves", 1)]
        assert all(e["last_upload"] for e in stats["routines_by_week_and_day"])

    def test_no_routines(self, repository, user_id):
        stats = repository.upload_stats(user_id)

        assert stats["total_routines"] == 0
        assert stats["routines_by_week_and_day"] == []
