import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import KeyValueStore, WorkoutRepository
from models import SetField
from workout_service import WorkoutDraft, WorkoutService, WorkoutValidationError


class WorkoutDraftTestCase(unittest.TestCase):
    def test_add_exercise_starts_with_empty_set(self) -> None:
        draft = WorkoutDraft()
        ex = draft.add_exercise()
        self.assertEqual(len(ex.sets), 1)
        self.assertEqual((ex.sets[0].reps, ex.sets[0].weight), (0, 0))

    def test_add_set_copies_previous(self) -> None:
        draft = WorkoutDraft()
        ex = draft.add_exercise("Squat")
        first = ex.sets[0]
        draft.update_set(ex.id, first.id, SetField.WEIGHT, 100)
        draft.update_set(ex.id, first.id, SetField.REPS, 5)
        second = draft.add_set(ex.id)
        self.assertNotEqual(second.id, first.id)
        self.assertEqual((second.reps, second.weight), (5, 100))
        self.assertEqual(draft.volume, 1000)

    def test_update_set_edge_values(self) -> None:
        draft = WorkoutDraft()
        ex = draft.add_exercise()
        s = ex.sets[0]
        draft.update_set(ex.id, s.id, SetField.RPE, 8)
        draft.update_set(ex.id, s.id, SetField.RPE, None)
        self.assertIsNone(s.rpe)
        draft.update_set(ex.id, s.id, SetField.WEIGHT, float("nan"))
        self.assertEqual(s.weight, 0)
        with self.assertRaises(ValueError):
            draft.update_set(ex.id, s.id, SetField.REPS, -1)
        with self.assertRaises(ValueError):
            draft.update_set(ex.id, "missing", SetField.REPS, 1)

    def test_remove_exercise_and_set(self) -> None:
        draft = WorkoutDraft()
        a = draft.add_exercise("A")
        b = draft.add_exercise("B")
        extra = draft.add_set(a.id)
        draft.remove_set(a.id, extra.id)
        self.assertEqual(len(a.sets), 1)
        draft.remove_exercise(a.id)
        self.assertEqual([ex.id for ex in draft.exercises], [b.id])
        draft.rename_exercise(b.id, "Bench")
        self.assertEqual(draft.exercises[0].name, "Bench")


class WorkoutServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_workouts.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.service = WorkoutService(WorkoutRepository(KeyValueStore(self.db_path), "u1"))
        self.now = datetime.datetime(2024, 5, 10, 18, 0)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def _leg_day(self) -> WorkoutDraft:
        draft = WorkoutDraft("Leg Day")
        ex = draft.add_exercise("Squat")
        s = ex.sets[0]
        draft.update_set(ex.id, s.id, SetField.WEIGHT, 100)
        draft.update_set(ex.id, s.id, SetField.REPS, 5)
        s2 = draft.add_set(ex.id)
        draft.update_set(ex.id, s2.id, SetField.WEIGHT, 80)
        draft.update_set(ex.id, s2.id, SetField.REPS, 8)
        return draft

    def test_save_leg_day(self) -> None:
        workout = self.service.save(self._leg_day(), self.now)
        self.assertEqual(workout.total_volume, 1140)
        self.assertEqual(workout.date, "2024-05-10T18:00:00")
        stored = self.service.list()
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0].total_volume, 1140)
        self.assertEqual(stored[0].exercises[0].name, "Squat")

    def test_saved_workout_is_detached_from_draft(self) -> None:
        draft = self._leg_day()
        workout = self.service.save(draft, self.now)
        ex = draft.exercises[0]
        draft.update_set(ex.id, ex.sets[0].id, SetField.WEIGHT, 500)
        self.assertEqual(workout.exercises[0].sets[0].weight, 100)

    def test_validation(self) -> None:
        with self.assertRaises(WorkoutValidationError) as ctx:
            self.service.save(WorkoutDraft("  "))
        self.assertEqual(str(ctx.exception), "Please enter a workout name")
        with self.assertRaises(WorkoutValidationError) as ctx:
            self.service.save(WorkoutDraft("Empty"))
        self.assertEqual(str(ctx.exception), "Add at least one exercise")
        self.assertEqual(self.service.list(), [])

    def test_unnamed_exercise_is_allowed(self) -> None:
        draft = WorkoutDraft("Quick")
        draft.add_exercise()
        workout = self.service.save(draft, self.now)
        self.assertEqual(workout.total_volume, 0)
        self.assertEqual(len(self.service.list()), 1)


if __name__ == "__main__":
    unittest.main()
