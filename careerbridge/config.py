"""
Service configuration.

Values come from the environment (a local ``.env`` file is loaded first), the same
way the service has always read its GitHub Models credentials.
"""

import os
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_MODELS = {
    "github": {"fast": "openai/gpt-4o-mini", "pro": "openai/gpt-4o"},
    "gemini": {"fast": "gemini-3-flash-preview", "pro": "gemini-3-pro-preview"},
}


class Settings(BaseModel):
    """Runtime settings for the CareerBridge service."""

    provider: Literal["github", "gemini"] = "github"

    github_token: Optional[str] = None
    github_model_endpoint: str = "https://models.github.ai/inference"
    github_model_candidates: List[str] = Field(default_factory=list)

    gemini_api_key: Optional[str] = None

    fast_model: Optional[str] = None
    pro_model: Optional[str] = None

    data_dir: Path = Path("data")
    log_level: str = "INFO"
    log_file: Optional[str] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    host: str = "0.0.0.0"
    port: int = Field(default=8000, gt=0, lt=65536)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    @property
    def resolved_fast_model(self) -> str:
        return self.fast_model or DEFAULT_MODELS[self.provider]["fast"]

    @property
    def resolved_pro_model(self) -> str:
        return self.pro_model or DEFAULT_MODELS[self.provider]["pro"]

    @property
    def storage_path(self) -> Path:
        return self.data_dir / "local_storage.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (after loading ``.env``)."""
        load_dotenv()

        def _csv(name: str) -> List[str]:
            raw = os.getenv(name, "").strip()
            return [item.strip() for item in raw.split(",") if item.strip()]

        values = {
            "provider": os.getenv("CAREERBRIDGE_PROVIDER", "github").strip().lower(),
            "github_token": os.getenv("GITHUB_TOKEN"),
            "github_model_endpoint": os.getenv(
                "GITHUB_MODEL_ENDPOINT", "https://models.github.ai/inference"
            ),
            # GITHUB_MODEL_ID is tried first, then the comma-separated candidates
            "github_model_candidates": [
                m for m in [os.getenv("GITHUB_MODEL_ID", "").strip()] if m
            ]
            + _csv("GITHUB_MODEL_CANDIDATES"),
            "gemini_api_key": os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            "fast_model": os.getenv("CAREERBRIDGE_FAST_MODEL") or None,
            "pro_model": os.getenv("CAREERBRIDGE_PRO_MODEL") or None,
            "data_dir": Path(os.getenv("CAREERBRIDGE_DATA_DIR", "data")),
            "log_level": os.getenv("CAREERBRIDGE_LOG_LEVEL", "INFO"),
            "log_file": os.getenv("CAREERBRIDGE_LOG_FILE") or None,
            "host": os.getenv("CAREERBRIDGE_HOST", "0.0.0.0"),
            "port": int(os.getenv("CAREERBRIDGE_PORT", "8000")),
        }
        cors = _csv("CAREERBRIDGE_CORS_ORIGINS")
        if cors:
            values["cors_origins"] = cors
        return cls(**values)
