import logging
import os
import yaml
import keyring

from settings_schema import SettingsSchema, parse_settings

APP_VERSION = "1.0.0"
KEYRING_MARKER = True

logger = logging.getLogger(__name__)


class YamlConfig:
    """Settings stored in a YAML file; secrets move to the OS keyring when
    ``ENCRYPT_SETTINGS=1``."""

    SENSITIVE_KEYS = frozenset({"gemini_api_key"})

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.service = "fitgenius"

    def _read_file(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def load(self) -> dict:
        data = self._read_file()
        if not self.encrypt:
            return data
        for key in self.SENSITIVE_KEYS.intersection(data):
            secret = keyring.get_password(self.service, key)
            if secret is None:
                del data[key]
            else:
                data[key] = secret
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS.intersection(out):
                if out[key] is None:
                    continue
                keyring.set_password(self.service, key, str(out[key]))
                out[key] = KEYRING_MARKER
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)

    def settings(self) -> SettingsSchema:
        """Return the validated settings, falling back to defaults.

        Invalid keys are dropped individually so valid ones still apply.
        """
        try:
            data = self.load()
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return SettingsSchema()
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a mapping", self.path)
            return SettingsSchema()
        try:
            return parse_settings(data)
        except ValueError as e:
            logger.warning("Invalid settings in %s: %s", self.path, e)
        valid = {}
        for key, value in data.items():
            try:
                parse_settings({key: value})
            except ValueError:
                logger.warning("Dropping invalid setting %s=%r", key, value)
            else:
                valid[key] = value
        return parse_settings(valid)


def resolve_api_key(settings: SettingsSchema) -> str | None:
    """Return the Gemini key from settings or the environment."""
    return (
        settings.gemini_api_key
        or os.environ.get("GEMINI_API_KEY")
        or os.environ.get("API_KEY")
    )
