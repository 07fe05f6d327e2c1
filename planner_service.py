from __future__ import annotations
import asyncio
import logging
from typing import List, Optional

import google.generativeai as genai
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import resolve_api_key
from models import Goal, Level
from settings_schema import SettingsSchema

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
USER_ERROR_MESSAGE = "Plan generation failed. Please try again later."
LANGUAGE_NAMES = {"en": "English", "it": "Italian"}


class PlanGenerationError(RuntimeError):
    """Raised when no usable plan could be obtained from the model."""


class PlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    goal: Goal = Goal.HYPERTROPHY
    level: Level = Level.INTERMEDIATE
    days_per_week: int = Field(3, ge=1, le=7, alias="daysPerWeek")
    equipment: str = "Full gym"


class PlanExercise(BaseModel):
    name: str
    sets: str
    reps: str
    notes: Optional[str] = None


class PlanDay(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day_name: str = Field(alias="dayName")
    focus: str
    exercises: List[PlanExercise]


class PlanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_name: str = Field(alias="planName")
    description: str
    schedule: List[PlanDay]


RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "planName": {"type": "STRING", "description": "A catchy name for the plan"},
        "description": {"type": "STRING", "description": "Short summary of the plan's focus"},
        "schedule": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "dayName": {"type": "STRING", "description": "E.g. Monday - Chest/Triceps or Day 1"},
                    "focus": {"type": "STRING", "description": "Muscle group or type of training"},
                    "exercises": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "name": {"type": "STRING"},
                                "sets": {"type": "STRING", "description": "Number of sets, e.g. '3-4'"},
                                "reps": {"type": "STRING", "description": "Rep range, e.g. '8-12'"},
                                "notes": {"type": "STRING", "description": "Technique or recovery tips"},
                            },
                            "required": ["name", "sets", "reps"],
                        },
                    },
                },
                "required": ["dayName", "focus", "exercises"],
            },
        },
    },
    "required": ["planName", "description", "schedule"],
}


class GeminiPlanGateway:
    """Send prompts to Gemini and return the raw JSON text of the reply."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
    ) -> None:
        self.model_name = model
        self.temperature = temperature
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name=model)

    def generate(self, prompt: str) -> str:
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=self.temperature,
        )
        response = self.model.generate_content(
            prompt, generation_config=generation_config
        )
        text = response.text if response is not None else ""
        if not text:
            raise PlanGenerationError("model returned no text")
        return text


class PlannerService:
    """Request structured workout plans from a generative model."""

    def __init__(self, gateway, language: str = "en") -> None:
        self.gateway = gateway
        self.language = language

    @classmethod
    def from_settings(cls, settings: SettingsSchema, gateway=None) -> "PlannerService":
        """Build a planner backed by Gemini unless a gateway is supplied."""
        if gateway is None:
            api_key = resolve_api_key(settings)
            if not api_key:
                raise PlanGenerationError("no Gemini API key configured")
            gateway = GeminiPlanGateway(
                api_key, settings.gemini_model, settings.plan_temperature
            )
        return cls(gateway, settings.language)

    def build_prompt(self, request: PlanRequest) -> str:
        language = LANGUAGE_NAMES.get(self.language, "English")
        return (
            "You are an expert personal trainer. Create a detailed workout plan "
            "based on the following user parameters:\n"
            f"- Goal: {request.goal.value}\n"
            f"- Level: {request.level.value}\n"
            f"- Days per week: {request.days_per_week}\n"
            f"- Available equipment: {request.equipment}\n\n"
            "Return the result STRICTLY as JSON following the requested schema. "
            "The plan must be practical, safe and progressive. "
            f"Write all text in {language}."
        )

    def generate_plan(self, request: PlanRequest) -> PlanResponse:
        prompt = self.build_prompt(request)
        try:
            text = self.gateway.generate(prompt)
            return PlanResponse.model_validate_json(text)
        except PlanGenerationError:
            logger.exception("Plan generation failed")
            raise
        except ValidationError as e:
            logger.error("Model returned an invalid plan: %s", e)
            raise PlanGenerationError("invalid plan returned by model") from e
        except Exception as e:
            logger.exception("Plan generation failed")
            raise PlanGenerationError(str(e)) from e

    async def generate_plan_async(self, request: PlanRequest) -> PlanResponse:
        return await asyncio.to_thread(self.generate_plan, request)
