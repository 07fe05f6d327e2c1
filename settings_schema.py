from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    theme: str = "dark"
    language: Literal["en", "it"] = "en"
    gemini_model: str = "gemini-2.5-flash"
    gemini_api_key: Optional[str] = None
    plan_temperature: float = Field(0.7, ge=0.0, le=2.0)
    recent_history_limit: int = Field(5, ge=1)


def parse_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema.model_validate(data)
    except ValidationError as e:
        raise ValueError(str(e))


def validate_settings(data: dict) -> None:
    parse_settings(data)
