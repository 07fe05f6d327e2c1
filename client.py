import requests
from typing import Optional


class FitClient:
    """Simple REST client for the local FitGenius API."""

    def __init__(self, base_url: str = "http://localhost:8000") -> None:
        self.base_url = base_url.rstrip("/")

    def login(self, username: str, password: str) -> dict:
        resp = requests.post(
            f"{self.base_url}/auth/login",
            params={"username": username, "password": password},
        )
        resp.raise_for_status()
        return resp.json()

    def logout(self) -> None:
        resp = requests.post(f"{self.base_url}/auth/logout")
        resp.raise_for_status()

    def log_workout(self, name: str, exercises: list[dict]) -> dict:
        resp = requests.post(
            f"{self.base_url}/workouts",
            json={"name": name, "exercises": exercises},
        )
        resp.raise_for_status()
        return resp.json()

    def dashboard(self) -> dict:
        resp = requests.get(f"{self.base_url}/dashboard")
        resp.raise_for_status()
        return resp.json()

    def add_meal(
        self,
        name: str,
        calories: int,
        protein: Optional[int] = None,
        carbs: Optional[int] = None,
        fats: Optional[int] = None,
    ) -> dict:
        params = {"name": name, "calories": calories}
        for key, value in (("protein", protein), ("carbs", carbs), ("fats", fats)):
            if value is not None:
                params[key] = value
        resp = requests.post(f"{self.base_url}/meals", params=params)
        resp.raise_for_status()
        return resp.json()

    def nutrition_today(self) -> dict:
        resp = requests.get(f"{self.base_url}/nutrition/today")
        resp.raise_for_status()
        return resp.json()

    def increment_challenge(self, challenge_id: str) -> dict:
        resp = requests.post(f"{self.base_url}/challenges/{challenge_id}/increment")
        resp.raise_for_status()
        return resp.json()

    def generate_plan(
        self, goal: str, level: str, days_per_week: int, equipment: str
    ) -> dict:
        resp = requests.post(
            f"{self.base_url}/ai/plan",
            json={
                "goal": goal,
                "level": level,
                "daysPerWeek": days_per_week,
                "equipment": equipment,
            },
        )
        resp.raise_for_status()
        return resp.json()
