import logging
from dataclasses import dataclass, replace
from typing import List

from db import ChallengeRepository
from models import Challenge, ChallengeType, generate_id
from tools import MathTools

logger = logging.getLogger(__name__)

VOLUME_STEP = 500
DEFAULT_STEP = 1


class ChallengeNotFoundError(ValueError):
    pass


@dataclass(frozen=True)
class ChallengePreset:
    title: str
    description: str
    target: float
    unit: str
    type: ChallengeType


PRESET_CHALLENGES: List[ChallengePreset] = [
    ChallengePreset(
        "Runner 5k",
        "Run 5 km in a single session or in total",
        5,
        "km",
        ChallengeType.DISTANCE,
    ),
    ChallengePreset(
        "Monthly Strength",
        "Complete 10 strength workouts",
        10,
        "sessions",
        ChallengeType.FREQUENCY,
    ),
    ChallengePreset(
        "Volume King",
        "Lift a total of 10,000 kg",
        10000,
        "kg",
        ChallengeType.VOLUME,
    ),
    ChallengePreset(
        "Weekly Marathon",
        "Run 42 km in total this month",
        42,
        "km",
        ChallengeType.DISTANCE,
    ),
]


class ChallengeService:
    """Track challenge progress for one user."""

    def __init__(self, repo: ChallengeRepository) -> None:
        self.repo = repo

    @staticmethod
    def from_preset(preset: ChallengePreset) -> Challenge:
        return Challenge(
            id=generate_id(),
            title=preset.title,
            description=preset.description,
            target=preset.target,
            unit=preset.unit,
            type=preset.type,
            current=0,
            completed=False,
        )

    @staticmethod
    def update_progress(challenge: Challenge, current: float) -> Challenge:
        """Return ``challenge`` moved to ``current`` with completion recomputed."""
        current = MathTools.clamp(current, 0, challenge.target)
        return replace(challenge, current=current, completed=current >= challenge.target)

    @staticmethod
    def increment_amount(challenge: Challenge) -> float:
        if challenge.type is ChallengeType.VOLUME:
            return VOLUME_STEP
        return DEFAULT_STEP

    @classmethod
    def increment(cls, challenge: Challenge) -> Challenge:
        """Advance ``challenge`` by one step; completed challenges stay as they are."""
        if challenge.completed:
            return challenge
        new_current = min(
            challenge.current + cls.increment_amount(challenge), challenge.target
        )
        return cls.update_progress(challenge, new_current)

    @staticmethod
    def progress_fraction(challenge: Challenge) -> float:
        if challenge.target <= 0:
            return 1.0 if challenge.completed else 0.0
        return MathTools.progress_fraction(challenge.current, challenge.target)

    def list(self) -> List[Challenge]:
        return self.repo.fetch_all()

    def add(
        self,
        title: str,
        target: float,
        unit: str,
        challenge_type: ChallengeType,
        description: str = "",
    ) -> Challenge:
        if not title.strip():
            raise ValueError("title is required")
        if target <= 0:
            raise ValueError("target must be positive")
        challenge = Challenge(
            id=generate_id(),
            title=title,
            description=description,
            target=target,
            unit=unit,
            type=challenge_type,
        )
        return self.repo.add(challenge)

    def add_preset(self, index: int) -> Challenge:
        if index < 0 or index >= len(PRESET_CHALLENGES):
            raise ChallengeNotFoundError("preset not found")
        return self.repo.add(self.from_preset(PRESET_CHALLENGES[index]))

    def _apply(self, challenge_id: str, change) -> Challenge:
        challenges = self.repo.fetch_all()
        for idx, challenge in enumerate(challenges):
            if challenge.id == challenge_id:
                updated = change(challenge)
                challenges[idx] = updated
                self.repo.replace_all(challenges)
                if updated.completed and not challenge.completed:
                    logger.info("Challenge %s completed", challenge.title)
                return updated
        raise ChallengeNotFoundError("challenge not found")

    def set_progress(self, challenge_id: str, current: float) -> Challenge:
        return self._apply(challenge_id, lambda c: self.update_progress(c, current))

    def increment_by_id(self, challenge_id: str) -> Challenge:
        return self._apply(challenge_id, self.increment)

    def delete(self, challenge_id: str) -> None:
        if not self.repo.delete(challenge_id):
            raise ChallengeNotFoundError("challenge not found")
