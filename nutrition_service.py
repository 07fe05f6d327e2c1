import datetime
import logging
import math
import re
from typing import Dict, List, Optional, Union

from db import MealRepository
from models import MacroField, Meal, generate_id
from stats_service import DailyNutrition, StatisticsService

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

RawNumber = Union[str, int, float, None]


class MealValidationError(ValueError):
    pass


class MealNotFoundError(ValueError):
    pass


def parse_int(raw: RawNumber) -> Optional[int]:
    """Parse the leading integer of ``raw``; return ``None`` when there is none."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return None if math.isnan(raw) or math.isinf(raw) else int(raw)
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else None


class MealDraft:
    """Meal form values as typed by the user."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.values: Dict[MacroField, RawNumber] = {m: "" for m in MacroField}

    def set(self, macro: MacroField, value: RawNumber) -> None:
        self.values[macro] = value

    def clear(self) -> None:
        self.name = ""
        self.values = {m: "" for m in MacroField}


class NutritionService:
    """Record meals and summarize the current day for one user."""

    def __init__(self, repo: MealRepository) -> None:
        self.repo = repo

    @staticmethod
    def build(draft: MealDraft, now: Optional[datetime.datetime] = None) -> Meal:
        if not draft.name or not draft.name.strip():
            raise MealValidationError("Meal name is required")
        calories = parse_int(draft.values[MacroField.CALORIES])
        if calories is None or calories < 0:
            raise MealValidationError("Calories must be a non-negative whole number")

        def macro(field: MacroField) -> int:
            value = parse_int(draft.values[field])
            return value if value is not None and value >= 0 else 0

        return Meal(
            id=generate_id(),
            name=draft.name,
            calories=calories,
            protein=macro(MacroField.PROTEIN),
            carbs=macro(MacroField.CARBS),
            fats=macro(MacroField.FATS),
            date=(now or datetime.datetime.now()).isoformat(),
        )

    def add(self, draft: MealDraft, now: Optional[datetime.datetime] = None) -> Meal:
        meal = self.build(draft, now)
        self.repo.add(meal)
        logger.info("Added meal %s (%d kcal)", meal.name, meal.calories)
        return meal

    def add_meal(
        self,
        name: str,
        calories: RawNumber,
        protein: RawNumber = None,
        carbs: RawNumber = None,
        fats: RawNumber = None,
        now: Optional[datetime.datetime] = None,
    ) -> Meal:
        draft = MealDraft(name)
        draft.set(MacroField.CALORIES, calories)
        draft.set(MacroField.PROTEIN, protein)
        draft.set(MacroField.CARBS, carbs)
        draft.set(MacroField.FATS, fats)
        return self.add(draft, now)

    def delete(self, meal_id: str) -> None:
        if not self.repo.delete(meal_id):
            raise MealNotFoundError("meal not found")

    def list(self) -> List[Meal]:
        return self.repo.fetch_all()

    def today(self, now: Optional[datetime.datetime] = None) -> DailyNutrition:
        return StatisticsService.daily_nutrition(self.repo.fetch_all(), now)
