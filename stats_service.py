from __future__ import annotations
import datetime
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from models import Exercise, MacroField, Meal, Workout, parse_timestamp
from tools import MathTools

RECENT_HISTORY_LIMIT = 5

MACRO_TARGETS: Dict[MacroField, int] = {
    MacroField.CALORIES: 2500,
    MacroField.PROTEIN: 150,
    MacroField.CARBS: 300,
    MacroField.FATS: 80,
}


@dataclass(frozen=True)
class VolumePoint:
    """One point of the chronological volume chart."""

    display_date: str
    volume: float
    name: str


@dataclass(frozen=True)
class MacroTotals:
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0

    def get(self, macro: MacroField) -> int:
        return getattr(self, macro.value)


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one macro against its daily target."""

    macro: MacroField
    current: int
    target: int
    fraction: float


@dataclass(frozen=True)
class DailyNutrition:
    date: str
    meals: List[Meal]
    totals: MacroTotals
    progress: Dict[MacroField, MacroProgress]


class StatisticsService:
    """Derive totals, chart series and progress values from entity snapshots.

    Every method is pure: inputs are never mutated and no state is kept
    between calls.
    """

    @staticmethod
    def _parse_timestamp(ts: str) -> datetime.datetime:
        return parse_timestamp(ts)

    @staticmethod
    def day_prefix(value: str | datetime.date | datetime.datetime) -> str:
        """Return the leading ``YYYY-MM-DD`` part of an ISO timestamp."""
        if isinstance(value, (datetime.date, datetime.datetime)):
            return value.isoformat()[:10]
        return value[:10]

    @staticmethod
    def workout_volume(exercises: Iterable[Exercise]) -> float:
        """Return the summed ``weight * reps`` of every set."""
        return MathTools.volume(
            (s.reps, s.weight) for ex in exercises for s in ex.sets
        )

    @classmethod
    def volume_series(cls, workouts: Iterable[Workout]) -> List[VolumePoint]:
        """Return workout volumes ordered by ascending date for charting."""
        ordered = sorted(workouts, key=lambda w: cls._parse_timestamp(w.date))
        return [
            VolumePoint(
                display_date=cls._parse_timestamp(w.date).strftime("%d/%m"),
                volume=w.total_volume,
                name=w.name,
            )
            for w in ordered
        ]

    @staticmethod
    def total_volume(workouts: Iterable[Workout]) -> float:
        return sum((w.total_volume for w in workouts), 0.0)

    @classmethod
    def recent_workouts(
        cls, workouts: Iterable[Workout], limit: int = RECENT_HISTORY_LIMIT
    ) -> List[Workout]:
        """Return the ``limit`` most recently dated workouts, newest first."""
        # stable sort: workouts with equal dates stay in recording order
        ordered = sorted(
            workouts, key=lambda w: cls._parse_timestamp(w.date), reverse=True
        )
        return ordered[:limit]

    @classmethod
    def daily_volume(cls, workouts: Iterable[Workout]) -> List[Dict[str, float]]:
        """Return total volume and workout count per day."""
        by_date: Dict[str, Dict[str, float]] = {}
        for w in workouts:
            entry = by_date.setdefault(
                cls.day_prefix(w.date), {"volume": 0.0, "workouts": 0}
            )
            entry["volume"] += w.total_volume
            entry["workouts"] += 1
        result = []
        for d in sorted(by_date):
            data = by_date[d]
            result.append(
                {
                    "date": d,
                    "volume": round(data["volume"], 2),
                    "workouts": data["workouts"],
                }
            )
        return result

    @classmethod
    def meals_for_day(
        cls, meals: Iterable[Meal], now: Optional[datetime.datetime] = None
    ) -> List[Meal]:
        """Return meals sharing ``now``'s day-prefix, most recently added first."""
        today = cls.day_prefix(now or datetime.datetime.now())
        todays = [m for m in meals if m.date.startswith(today)]
        todays.reverse()
        return todays

    @staticmethod
    def macro_totals(meals: Iterable[Meal]) -> MacroTotals:
        calories = protein = carbs = fats = 0
        for m in meals:
            calories += m.calories
            protein += m.protein
            carbs += m.carbs
            fats += m.fats
        return MacroTotals(calories, protein, carbs, fats)

    @staticmethod
    def macro_progress(totals: MacroTotals) -> Dict[MacroField, MacroProgress]:
        return {
            macro: MacroProgress(
                macro=macro,
                current=totals.get(macro),
                target=target,
                fraction=MathTools.progress_fraction(totals.get(macro), target),
            )
            for macro, target in MACRO_TARGETS.items()
        }

    @classmethod
    def daily_nutrition(
        cls, meals: Iterable[Meal], now: Optional[datetime.datetime] = None
    ) -> DailyNutrition:
        """Return today's meals, macro totals and progress toward targets.

        A meal belongs to the day when its date string starts with the
        ``YYYY-MM-DD`` prefix of ``now`` (local wall-clock time if omitted).
        """
        now = now or datetime.datetime.now()
        todays = cls.meals_for_day(meals, now)
        totals = cls.macro_totals(todays)
        return DailyNutrition(
            date=cls.day_prefix(now),
            meals=todays,
            totals=totals,
            progress=cls.macro_progress(totals),
        )
