from __future__ import annotations

import datetime
import enum
import random
import string
from dataclasses import dataclass, field
from typing import Optional

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 9


def generate_id() -> str:
    """Return a short random identifier for a new entity."""
    return "".join(random.choices(ID_ALPHABET, k=ID_LENGTH))


def parse_timestamp(ts: str) -> datetime.datetime:
    """Return ISO ``ts`` as a timezone-aware datetime; naive values are UTC.

    Raises ``ValueError`` when ``ts`` is not an ISO timestamp.
    """
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def _number(value, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _int(value, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


class ChallengeType(str, enum.Enum):
    DISTANCE = "distance"
    FREQUENCY = "frequency"
    VOLUME = "volume"


class Gender(str, enum.Enum):
    MALE = "M"
    FEMALE = "F"
    OTHER = "Other"


class Goal(str, enum.Enum):
    HYPERTROPHY = "Hypertrophy (Mass)"
    STRENGTH = "Strength"
    ENDURANCE = "Endurance"
    WEIGHT_LOSS = "Weight Loss"


class Level(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class MacroField(str, enum.Enum):
    """Numeric fields of a meal that can be edited individually."""

    CALORIES = "calories"
    PROTEIN = "protein"
    CARBS = "carbs"
    FATS = "fats"


class SetField(str, enum.Enum):
    """Numeric fields of an exercise set that can be edited individually."""

    REPS = "reps"
    WEIGHT = "weight"
    RPE = "rpe"


@dataclass
class ExerciseSet:
    id: str = field(default_factory=generate_id)
    reps: float = 0.0
    weight: float = 0.0
    rpe: Optional[float] = None

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    def to_dict(self) -> dict:
        data = {"id": self.id, "reps": self.reps, "weight": self.weight}
        if self.rpe is not None:
            data["rpe"] = self.rpe
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseSet":
        rpe = data.get("rpe")
        return cls(
            id=str(data["id"]),
            reps=_number(data.get("reps")),
            weight=_number(data.get("weight")),
            rpe=None if rpe is None else _number(rpe),
        )


@dataclass
class Exercise:
    id: str = field(default_factory=generate_id)
    name: str = ""
    sets: list[ExerciseSet] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            sets=[ExerciseSet.from_dict(s) for s in data.get("sets") or []],
        )


@dataclass
class Workout:
    """A logged training session.

    ``total_volume`` is derived from the sets at save time and stored with
    the workout (``totalVolume`` in the persisted JSON).
    """

    id: str
    date: str
    name: str
    exercises: list[Exercise] = field(default_factory=list)
    total_volume: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "name": self.name,
            "exercises": [e.to_dict() for e in self.exercises],
            "totalVolume": self.total_volume,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Workout":
        date = str(data["date"])
        parse_timestamp(date)
        return cls(
            id=str(data["id"]),
            date=date,
            name=data.get("name") or "",
            exercises=[Exercise.from_dict(e) for e in data.get("exercises") or []],
            total_volume=_number(data.get("totalVolume")),
        )


@dataclass
class Meal:
    id: str
    name: str
    calories: int
    protein: int
    carbs: int
    fats: int
    date: str

    def macro(self, macro: MacroField) -> int:
        return getattr(self, macro.value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Meal":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            calories=_int(data.get("calories")),
            protein=_int(data.get("protein")),
            carbs=_int(data.get("carbs")),
            fats=_int(data.get("fats")),
            date=str(data["date"]),
        )


@dataclass
class Challenge:
    """A goal with a numeric target.

    ``completed`` always mirrors ``current >= target``; use
    :class:`challenge_service.ChallengeService` to produce updated copies.
    """

    id: str
    title: str
    description: str
    target: float
    unit: str
    type: ChallengeType
    current: float = 0.0
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "target": self.target,
            "current": self.current,
            "unit": self.unit,
            "completed": self.completed,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Challenge":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            target=_number(data.get("target")),
            unit=data.get("unit") or "",
            type=ChallengeType(data.get("type", ChallengeType.FREQUENCY.value)),
            current=_number(data.get("current")),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class UserProfile:
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    gender: Optional[Gender] = None

    def to_dict(self) -> dict:
        data: dict = {}
        if self.age is not None:
            data["age"] = self.age
        if self.weight is not None:
            data["weight"] = self.weight
        if self.height is not None:
            data["height"] = self.height
        if self.gender is not None:
            data["gender"] = self.gender.value
        return data

    @classmethod
    def from_dict(cls, data: dict | None) -> "UserProfile":
        data = data or {}
        gender = data.get("gender")
        return cls(
            age=_int(data["age"]) if data.get("age") is not None else None,
            weight=_number(data["weight"]) if data.get("weight") is not None else None,
            height=_number(data["height"]) if data.get("height") is not None else None,
            gender=Gender(gender) if gender else None,
        )


@dataclass
class User:
    id: str
    username: str
    name: str
    password: Optional[str] = None
    profile: UserProfile = field(default_factory=UserProfile)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "profile": self.profile.to_dict(),
        }
        if self.password is not None:
            data["password"] = self.password
        return data

    def public_dict(self) -> dict:
        """Return the user without credentials."""
        data = self.to_dict()
        data.pop("password", None)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=str(data["id"]),
            username=str(data["username"]),
            name=data.get("name") or "",
            password=data.get("password"),
            profile=UserProfile.from_dict(data.get("profile")),
        )
