import copy
import datetime
import logging
import math
from typing import List, Optional

from db import WorkoutRepository
from models import Exercise, ExerciseSet, SetField, Workout, generate_id
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


class WorkoutValidationError(ValueError):
    pass


class WorkoutDraft:
    """Workout being edited before it is saved."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.exercises: List[Exercise] = []

    def _exercise(self, exercise_id: str) -> Exercise:
        for ex in self.exercises:
            if ex.id == exercise_id:
                return ex
        raise ValueError("exercise not found")

    def add_exercise(self, name: str = "") -> Exercise:
        exercise = Exercise(name=name, sets=[ExerciseSet()])
        self.exercises.append(exercise)
        return exercise

    def rename_exercise(self, exercise_id: str, name: str) -> None:
        self._exercise(exercise_id).name = name

    def remove_exercise(self, exercise_id: str) -> None:
        self.exercises = [ex for ex in self.exercises if ex.id != exercise_id]

    def add_set(self, exercise_id: str) -> ExerciseSet:
        """Append a set that repeats the reps and weight of the previous one."""
        exercise = self._exercise(exercise_id)
        last = exercise.sets[-1] if exercise.sets else None
        new_set = ExerciseSet(
            reps=last.reps if last else 0.0,
            weight=last.weight if last else 0.0,
        )
        exercise.sets.append(new_set)
        return new_set

    def update_set(
        self, exercise_id: str, set_id: str, field: SetField, value: Optional[float]
    ) -> None:
        exercise = self._exercise(exercise_id)
        for s in exercise.sets:
            if s.id == set_id:
                break
        else:
            raise ValueError("set not found")
        if value is None or math.isnan(value):
            value = None if field is SetField.RPE else 0.0
        elif value < 0:
            raise ValueError(f"{field.value} must be non-negative")
        setattr(s, field.value, value)

    def remove_set(self, exercise_id: str, set_id: str) -> None:
        exercise = self._exercise(exercise_id)
        exercise.sets = [s for s in exercise.sets if s.id != set_id]

    @property
    def volume(self) -> float:
        return StatisticsService.workout_volume(self.exercises)


class WorkoutService:
    """Validate and persist workouts for one user."""

    def __init__(self, repo: WorkoutRepository) -> None:
        self.repo = repo

    @staticmethod
    def build(
        name: str,
        exercises: List[Exercise],
        now: Optional[datetime.datetime] = None,
    ) -> Workout:
        """Return a finalized workout with its volume computed from ``exercises``."""
        if not name or not name.strip():
            raise WorkoutValidationError("Please enter a workout name")
        if not exercises:
            raise WorkoutValidationError("Add at least one exercise")
        snapshot = copy.deepcopy(exercises)
        return Workout(
            id=generate_id(),
            date=(now or datetime.datetime.now()).isoformat(),
            name=name,
            exercises=snapshot,
            total_volume=StatisticsService.workout_volume(snapshot),
        )

    def save(
        self, draft: WorkoutDraft, now: Optional[datetime.datetime] = None
    ) -> Workout:
        return self.log(draft.name, draft.exercises, now)

    def log(
        self,
        name: str,
        exercises: List[Exercise],
        now: Optional[datetime.datetime] = None,
    ) -> Workout:
        workout = self.build(name, exercises, now)
        self.repo.add(workout)
        logger.info("Saved workout %s with volume %.1f", workout.name, workout.total_volume)
        return workout

    def list(self) -> List[Workout]:
        return self.repo.fetch_all()
