import datetime
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException, Body
from pydantic import BaseModel, Field

from account_service import (
    AccountService,
    AuthenticationError,
    NotAuthenticatedError,
    Session,
)
from challenge_service import (
    PRESET_CHALLENGES,
    ChallengeNotFoundError,
    ChallengeService,
)
from config import YamlConfig
from db import KeyValueStore
from models import ChallengeType, Exercise, ExerciseSet, Gender, UserProfile
from nutrition_service import MealNotFoundError
from planner_service import (
    USER_ERROR_MESSAGE,
    PlanGenerationError,
    PlannerService,
    PlanRequest,
)
from stats_service import StatisticsService


class SetIn(BaseModel):
    reps: float = Field(0, ge=0)
    weight: float = Field(0, ge=0)
    rpe: Optional[float] = None


class ExerciseIn(BaseModel):
    name: str = ""
    sets: List[SetIn] = []


class WorkoutIn(BaseModel):
    name: str
    exercises: List[ExerciseIn] = []


class ProfileIn(BaseModel):
    age: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)
    gender: Optional[Gender] = None


class FitAPI:
    """Provides local REST endpoints for workouts, nutrition and challenges."""

    def __init__(
        self,
        db_path: str = "fitgenius.db",
        yaml_path: str = "settings.yaml",
        *,
        gateway=None,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self.db_path = db_path
        self.config = YamlConfig(yaml_path)
        self.settings = self.config.settings()
        self.store = KeyValueStore(db_path)
        self.accounts = AccountService(self.store)
        self.accounts.restore()
        self.gateway = gateway
        self.clock = clock or datetime.datetime.now
        self.app = FastAPI(
            title="FitGenius API",
            description="Local REST API for workout, nutrition and challenge tracking",
        )
        self._setup_routes()

    def _session(self) -> Session:
        try:
            return self.accounts.require_session()
        except NotAuthenticatedError as e:
            raise HTTPException(status_code=401, detail=str(e))

    def _planner(self) -> PlannerService:
        planner = PlannerService.from_settings(self.settings, self.gateway)
        self.gateway = planner.gateway
        return planner

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            """Return API and storage connection status."""
            try:
                self.store.keys()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - storage failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.post("/auth/register")
        def register(username: str, password: str, name: str):
            try:
                user = self.accounts.register(username, password, name, self.clock())
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return user.public_dict()

        @self.app.post("/auth/login")
        def login(username: str, password: str):
            try:
                user = self.accounts.login(username, password, self.clock())
            except AuthenticationError as e:
                raise HTTPException(status_code=401, detail=str(e))
            return user.public_dict()

        @self.app.post("/auth/logout")
        def logout():
            self.accounts.logout()
            return {"status": "logged_out"}

        @self.app.get("/session")
        def get_session():
            user = self.accounts.current_user
            return {
                "authenticated": user is not None,
                "user": user.public_dict() if user else None,
            }

        @self.app.put("/profile")
        def update_profile(profile: ProfileIn):
            self._session()
            user = self.accounts.update_profile(
                UserProfile(
                    age=profile.age,
                    weight=profile.weight,
                    height=profile.height,
                    gender=profile.gender,
                )
            )
            return user.public_dict()

        @self.app.get("/workouts")
        def list_workouts():
            return [w.to_dict() for w in self._session().workouts.list()]

        @self.app.post("/workouts")
        def create_workout(workout: WorkoutIn):
            session = self._session()
            exercises = [
                Exercise(
                    name=ex.name,
                    sets=[
                        ExerciseSet(reps=s.reps, weight=s.weight, rpe=s.rpe)
                        for s in ex.sets
                    ],
                )
                for ex in workout.exercises
            ]
            try:
                saved = session.workouts.log(workout.name, exercises, self.clock())
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return saved.to_dict()

        @self.app.get("/dashboard")
        def dashboard(limit: int | None = None):
            workouts = self._session().workouts.list()
            recent = StatisticsService.recent_workouts(
                workouts, limit or self.settings.recent_history_limit
            )
            return {
                "total_volume": StatisticsService.total_volume(workouts),
                "workout_count": len(workouts),
                "series": [
                    {"date": p.display_date, "volume": p.volume, "name": p.name}
                    for p in StatisticsService.volume_series(workouts)
                ],
                "recent": [w.to_dict() for w in recent],
            }

        @self.app.get("/stats/daily_volume")
        def daily_volume():
            return StatisticsService.daily_volume(self._session().workouts.list())

        @self.app.get("/meals")
        def list_meals():
            return [m.to_dict() for m in self._session().nutrition.list()]

        @self.app.post("/meals")
        def add_meal(
            name: str,
            calories: str,
            protein: str = "",
            carbs: str = "",
            fats: str = "",
        ):
            session = self._session()
            try:
                meal = session.nutrition.add_meal(
                    name, calories, protein, carbs, fats, self.clock()
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return meal.to_dict()

        @self.app.delete("/meals/{meal_id}")
        def delete_meal(meal_id: str):
            try:
                self._session().nutrition.delete(meal_id)
            except MealNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @self.app.get("/nutrition/today")
        def nutrition_today():
            summary = self._session().nutrition.today(self.clock())
            return {
                "date": summary.date,
                "meals": [m.to_dict() for m in summary.meals],
                "totals": {
                    macro.value: progress.current
                    for macro, progress in summary.progress.items()
                },
                "progress": {
                    macro.value: {
                        "current": progress.current,
                        "target": progress.target,
                        "fraction": progress.fraction,
                    }
                    for macro, progress in summary.progress.items()
                },
            }

        @self.app.get("/challenges")
        def list_challenges():
            return [
                {**c.to_dict(), "progress": ChallengeService.progress_fraction(c)}
                for c in self._session().challenges.list()
            ]

        @self.app.get("/challenges/presets")
        def list_presets():
            return [
                {
                    "index": idx,
                    "title": p.title,
                    "description": p.description,
                    "target": p.target,
                    "unit": p.unit,
                    "type": p.type.value,
                }
                for idx, p in enumerate(PRESET_CHALLENGES)
            ]

        @self.app.post("/challenges")
        def add_challenge(
            title: str,
            target: float,
            unit: str,
            challenge_type: ChallengeType,
            description: str = "",
        ):
            session = self._session()
            try:
                challenge = session.challenges.add(
                    title, target, unit, challenge_type, description
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return challenge.to_dict()

        @self.app.post("/challenges/presets/{index}")
        def add_preset_challenge(index: int):
            try:
                challenge = self._session().challenges.add_preset(index)
            except ChallengeNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return challenge.to_dict()

        @self.app.put("/challenges/{cid}/progress")
        def update_challenge_progress(cid: str, current: float):
            try:
                challenge = self._session().challenges.set_progress(cid, current)
            except ChallengeNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return challenge.to_dict()

        @self.app.post("/challenges/{cid}/increment")
        def increment_challenge(cid: str):
            try:
                challenge = self._session().challenges.increment_by_id(cid)
            except ChallengeNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return challenge.to_dict()

        @self.app.delete("/challenges/{cid}")
        def delete_challenge(cid: str):
            try:
                self._session().challenges.delete(cid)
            except ChallengeNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @self.app.post("/ai/plan")
        async def generate_plan(request: PlanRequest = Body(...)):
            try:
                plan = await self._planner().generate_plan_async(request)
            except PlanGenerationError:
                raise HTTPException(status_code=502, detail=USER_ERROR_MESSAGE)
            return plan.model_dump(by_alias=True)


if __name__ == "__main__":
    import os
    import uvicorn

    api = FitAPI(
        db_path=os.environ.get("DB_PATH", "fitgenius.db"),
        yaml_path=os.environ.get("YAML_PATH", "settings.yaml"),
    )
    uvicorn.run(api.app)
