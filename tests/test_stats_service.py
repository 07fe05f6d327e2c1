import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import Exercise, ExerciseSet, MacroField, Meal, Workout
from stats_service import MACRO_TARGETS, MacroTotals, StatisticsService
from tools import MathTools


def _workout(wid: str, date: str, volume: float, name: str = "W") -> Workout:
    return Workout(id=wid, date=date, name=name, exercises=[], total_volume=volume)


def _meal(mid: str, calories: int, date: str, protein: int = 0) -> Meal:
    return Meal(mid, mid, calories, protein, 0, 0, date)


class MathToolsTestCase(unittest.TestCase):
    def test_clamp(self) -> None:
        self.assertEqual(MathTools.clamp(5, 0, 10), 5)
        self.assertEqual(MathTools.clamp(-1, 0, 10), 0)
        self.assertEqual(MathTools.clamp(11, 0, 10), 10)
        with self.assertRaises(ValueError):
            MathTools.clamp(1, 2, 1)

    def test_volume(self) -> None:
        self.assertEqual(MathTools.volume([(5, 100), (8, 80)]), 1140)
        self.assertEqual(MathTools.volume([]), 0)

    def test_progress_fraction(self) -> None:
        self.assertAlmostEqual(MathTools.progress_fraction(75, 150), 0.5)
        self.assertEqual(MathTools.progress_fraction(300, 150), 1.0)
        self.assertEqual(MathTools.progress_fraction(300, 150, cap=False), 2.0)
        with self.assertRaises(ValueError):
            MathTools.progress_fraction(1, 0)


class VolumeTestCase(unittest.TestCase):
    def test_leg_day_volume(self) -> None:
        exercises = [
            Exercise(
                name="Squat",
                sets=[ExerciseSet(reps=5, weight=100), ExerciseSet(reps=8, weight=80)],
            )
        ]
        self.assertEqual(StatisticsService.workout_volume(exercises), 1140)

    def test_volume_ignores_order(self) -> None:
        a = ExerciseSet(reps=5, weight=100)
        b = ExerciseSet(reps=10, weight=20)
        c = ExerciseSet(reps=3, weight=0)
        first = [Exercise(name="A", sets=[a, b]), Exercise(name="B", sets=[c])]
        second = [Exercise(name="B", sets=[c]), Exercise(name="A", sets=[b, a])]
        self.assertEqual(
            StatisticsService.workout_volume(first),
            StatisticsService.workout_volume(second),
        )
        self.assertEqual(StatisticsService.workout_volume([]), 0)

    def test_series_sorted_ascending(self) -> None:
        workouts = [
            _workout("b", "2024-05-12T10:00:00", 200, "Second"),
            _workout("a", "2024-05-03T10:00:00", 100, "First"),
            _workout("c", "2024-06-01T10:00:00", 300, "Third"),
        ]
        series = StatisticsService.volume_series(workouts)
        self.assertEqual([p.name for p in series], ["First", "Second", "Third"])
        self.assertEqual([p.display_date for p in series], ["03/05", "12/05", "01/06"])
        self.assertEqual([w.id for w in workouts], ["b", "a", "c"])
        self.assertEqual(StatisticsService.volume_series(workouts[::-1]), series)

    def test_series_handles_utc_suffix(self) -> None:
        series = StatisticsService.volume_series(
            [_workout("a", "2024-05-10T18:30:00.000Z", 50)]
        )
        self.assertEqual(series[0].display_date, "10/05")

    def test_total_volume(self) -> None:
        workouts = [_workout("a", "2024-05-01", 100), _workout("b", "2024-05-02", 40.5)]
        self.assertEqual(StatisticsService.total_volume(workouts), 140.5)
        self.assertEqual(StatisticsService.total_volume([]), 0)

    def test_recent_workouts(self) -> None:
        workouts = [
            _workout(str(i), f"2024-05-{i + 1:02d}T10:00:00", i) for i in range(7)
        ]
        recent = StatisticsService.recent_workouts(workouts)
        self.assertEqual([w.id for w in recent], ["6", "5", "4", "3", "2"])
        self.assertEqual(len(StatisticsService.recent_workouts(workouts[:2])), 2)

    def test_recent_ties_keep_recorded_order(self) -> None:
        workouts = [
            _workout("first", "2024-05-01T10:00:00", 1),
            _workout("second", "2024-05-01T10:00:00", 2),
        ]
        recent = StatisticsService.recent_workouts(workouts)
        self.assertEqual([w.id for w in recent], ["first", "second"])

    def test_daily_volume(self) -> None:
        workouts = [
            _workout("a", "2024-05-02T08:00:00", 100),
            _workout("b", "2024-05-01T08:00:00", 50),
            _workout("c", "2024-05-02T19:00:00", 25.5),
        ]
        self.assertEqual(
            StatisticsService.daily_volume(workouts),
            [
                {"date": "2024-05-01", "volume": 50.0, "workouts": 1},
                {"date": "2024-05-02", "volume": 125.5, "workouts": 2},
            ],
        )


class NutritionSummaryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.now = datetime.datetime(2024, 5, 10, 20, 0, 0)
        self.meals = [
            _meal("yesterday", 1000, "2024-05-09T13:00:00"),
            _meal("lunch", 500, "2024-05-10T12:00:00", protein=40),
            _meal("dinner", 700, "2024-05-10T19:30:00", protein=50),
        ]

    def test_only_today_counts(self) -> None:
        summary = StatisticsService.daily_nutrition(self.meals, self.now)
        self.assertEqual(summary.date, "2024-05-10")
        self.assertEqual(summary.totals.calories, 1200)
        self.assertEqual(summary.totals.protein, 90)
        self.assertEqual([m.id for m in summary.meals], ["dinner", "lunch"])

    def test_no_meals_today(self) -> None:
        summary = StatisticsService.daily_nutrition(
            self.meals, datetime.datetime(2024, 5, 11, 8, 0)
        )
        self.assertEqual(summary.meals, [])
        self.assertEqual(summary.totals, MacroTotals())
        for progress in summary.progress.values():
            self.assertEqual(progress.fraction, 0)

    def test_progress_is_capped(self) -> None:
        progress = StatisticsService.macro_progress(MacroTotals(calories=3000, protein=75))
        self.assertEqual(progress[MacroField.CALORIES].fraction, 1.0)
        self.assertEqual(progress[MacroField.CALORIES].current, 3000)
        self.assertAlmostEqual(progress[MacroField.PROTEIN].fraction, 0.5)
        self.assertEqual(progress[MacroField.FATS].target, MACRO_TARGETS[MacroField.FATS])

    def test_targets(self) -> None:
        self.assertEqual(
            {m.value: t for m, t in MACRO_TARGETS.items()},
            {"calories": 2500, "protein": 150, "carbs": 300, "fats": 80},
        )


if __name__ == "__main__":
    unittest.main()
