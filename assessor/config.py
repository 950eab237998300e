import logging
from functools import lru_cache
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from assessor.constants import AVAILABLE_MODELS, FALLBACK_LADDER


class Settings(BaseSettings):
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    DEFAULT_MODEL: str = FALLBACK_LADDER[0]
    DEMO_MODE: bool = False
    RATE_LIMIT: str = "10/minute"
    LOCAL_SCAN_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
    ]

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings():
    return Settings()


def is_known_model(model_id: str) -> bool:
    return any(m["id"] == model_id for m in AVAILABLE_MODELS)


def validate_api_key(key: str) -> bool:
    """Advisory format check; a key failing it is still used."""
    key = key.strip()
    return key.startswith("sk-") and len(key) > 20


class AnalysisConfig(BaseModel):
    """Everything one analysis batch needs to know about the remote service."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    model: str = FALLBACK_LADDER[0]
    demo_mode: bool = False
    base_url: str = "https://api.openai.com/v1"

    @field_validator("model")
    @classmethod
    def _known_model(cls, value: str) -> str:
        if not is_known_model(value):
            raise ValueError(f"Unknown model: {value}")
        return value

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key.strip())


class ConfigStore:
    """
    Session-wide analysis choices.

    Changed only through explicit calls; ``snapshot()`` hands an immutable
    ``AnalysisConfig`` to each batch so a batch never sees a change made
    while it runs.
    """

    def __init__(self, settings: Settings):
        self._base_url = settings.OPENAI_BASE_URL
        self._api_key = settings.OPENAI_API_KEY
        self._model = settings.DEFAULT_MODEL if is_known_model(settings.DEFAULT_MODEL) else FALLBACK_LADDER[0]
        self._demo_mode = settings.DEMO_MODE

    def set_credential(self, key: str) -> bool:
        """Store the key and leave demo mode. Returns the advisory format check."""
        self._api_key = key.strip()
        self._demo_mode = False
        logging.info(f"API key set (length: {len(self._api_key)})")
        return validate_api_key(self._api_key)

    def clear_credential(self):
        self._api_key = ""
        logging.info("API key cleared")

    def set_model(self, model_id: str):
        if not is_known_model(model_id):
            raise ValueError(f"Unknown model: {model_id}")
        self._model = model_id

    def set_demo_mode(self, enabled: bool):
        self._demo_mode = enabled

    @property
    def model(self) -> str:
        return self._model

    @property
    def demo_mode(self) -> bool:
        return self._demo_mode

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key)

    @property
    def credential_looks_valid(self) -> bool:
        return validate_api_key(self._api_key)

    def snapshot(self) -> AnalysisConfig:
        return AnalysisConfig(
            api_key=self._api_key,
            model=self._model,
            demo_mode=self._demo_mode,
            base_url=self._base_url,
        )
