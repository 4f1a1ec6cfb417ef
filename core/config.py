"""REST client configuration.

Everything the client needs is supplied once, at construction, and is
read-only afterwards. ``RestClientConfig.from_env()`` builds it from
environment variables (a ``.env`` file in the working directory is loaded
first if it exists):

- REST_MAPPER_BASE_URL: Base URL of the REST service (required)
- REST_MAPPER_MAPPING_PATH: JSON file with the mapping (optional)
- REST_MAPPER_TRANSLATIONS: JSON object of ``$placeholder`` values (optional)
- REST_MAPPER_TIMEOUT: Request timeout in seconds (default 30)
- REST_MAPPER_LOG_LEVEL: Logging level name (default INFO)
- REST_MAPPER_LOG_JSON: "true" for JSON logs (default false)
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ConfigDict

from core.mapping.config import MappingConfig, load_mapping


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class RestClientConfig(BaseModel):
    """Construction-time settings for a RestClient."""
    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Base URL for all requests")
    mapping: MappingConfig = Field(default_factory=MappingConfig)
    translation_map: Dict[str, Any] = Field(default_factory=dict)
    transport_defaults: Dict[str, Any] = Field(
        default_factory=dict,
        description="Merged into every request: 'headers' plus opaque transport options",
    )
    timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "RestClientConfig":
        """Create a configuration from environment variables.

        Args:
            env_file: .env file to load (defaults to ./.env when present)

        Raises:
            ValueError: If REST_MAPPER_BASE_URL is missing or a value is malformed
        """
        env_path = env_file or Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        base_url = os.getenv("REST_MAPPER_BASE_URL")
        if not base_url:
            raise ValueError(
                "REST_MAPPER_BASE_URL environment variable not set. "
                "Set to the base URL of the REST service (e.g., 'http://host/api/v1')"
            )

        mapping_path = os.getenv("REST_MAPPER_MAPPING_PATH")
        mapping = load_mapping(mapping_path) if mapping_path else MappingConfig()

        translations_raw = os.getenv("REST_MAPPER_TRANSLATIONS")
        translation_map: Dict[str, Any] = {}
        if translations_raw:
            try:
                translation_map = json.loads(translations_raw)
            except json.JSONDecodeError as e:
                raise ValueError(f"REST_MAPPER_TRANSLATIONS is not valid JSON: {e}") from e
            if not isinstance(translation_map, dict):
                raise ValueError("REST_MAPPER_TRANSLATIONS must be a JSON object")

        return cls(
            base_url=base_url,
            mapping=mapping,
            translation_map=translation_map,
            timeout_seconds=float(os.getenv("REST_MAPPER_TIMEOUT", "30")),
            log_level=os.getenv("REST_MAPPER_LOG_LEVEL", "INFO").upper(),
            log_json=_env_flag(os.getenv("REST_MAPPER_LOG_JSON")),
        )
