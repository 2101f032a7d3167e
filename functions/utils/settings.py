"""
functions/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the runtime configuration of BOTH services:

- InnerSettings  -> inner service (data producer, random failures)
- EdgeSettings   -> edge service (proxy in front of the inner service)

It is responsible for:
- Declaring every configuration field (via Pydantic BaseSettings)
- Loading default values from parameters/<service>.yaml
- Overriding defaults with environment variables
  (INNER_SERVICE_* / EDGE_SERVICE_*)
- Failing fast when a required setting is missing (edge: inner_service_url)
- Configuring structlog from the merged log_level / log_format BEFORE
  any load event is logged
- Exposing one cached, validated Settings object per service

LOAD & PRECEDENCE MODEL
-----------------------
Configuration is loaded in the following order (last wins):

1) YAML defaults from:
       parameters/inner_service.yaml
       parameters/edge_service.yaml
2) Environment variables:
       INNER_SERVICE_*
       EDGE_SERVICE_*

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- HTTP calls
- Request handling
- Error mapping

It should only define *configuration structure and loading rules*.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

import structlog
import yaml
from pydantic import AnyHttpUrl, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from functions.utils.logging_config import configure_logging

logger = structlog.get_logger(__name__)

PARAMETERS_DIR = Path(__file__).resolve().parents[2] / "parameters"
INNER_PARAMETERS_PATH = PARAMETERS_DIR / "inner_service.yaml"
EDGE_PARAMETERS_PATH = PARAMETERS_DIR / "edge_service.yaml"


class _CommonSettings(BaseSettings):
    """Fields shared by both services."""

    model_config = SettingsConfigDict(extra="ignore")

    # Service metadata
    service_name: str = "service"
    environment: str = "local"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # Server binding (used by the console scripts only)
    host: str = "0.0.0.0"
    port: int = 8080

    # Response rendering
    indent_json: bool = Field(
        default=True,
        description="If true, JSON bodies are pretty-printed (indent=2).",
    )


class InnerSettings(_CommonSettings):
    """
    Runtime settings for the inner service.

    Load order / precedence:
        1) YAML defaults (parameters/inner_service.yaml)
        2) Environment variables (INNER_SERVICE_*), overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="INNER_SERVICE_",
        extra="ignore",
    )

    service_name: str = "inner_service"
    port: int = 8081

    failure_probability: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Probability that a /retrieveData call fails with 'processing error'.",
    )
    response_value: str = Field(default="hi there!", min_length=1)


class EdgeSettings(_CommonSettings):
    """
    Runtime settings for the edge service.

    Load order / precedence:
        1) YAML defaults (parameters/edge_service.yaml)
        2) Environment variables (EDGE_SERVICE_*), overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="EDGE_SERVICE_",
        extra="ignore",
    )

    service_name: str = "edge_service"
    port: int = 8080

    # Optional at the model level to allow partial env loading;
    # enforced explicitly in get_edge_settings().
    inner_service_url: Optional[AnyHttpUrl] = None

    # The only client-side limit; there is no retry policy.
    inner_service_timeout_seconds: float = Field(default=5.0, gt=0)


# (level, event, context) recorded while sources are read; emitted once
# logging is configured from the merged log_level / log_format.
_LoadEvent = Tuple[str, str, Dict[str, Any]]


def _load_yaml_parameters(path: Path, events: List[_LoadEvent]) -> Dict[str, Any]:
    """
    Load base configuration from a parameters YAML file.

    A missing or malformed file is not fatal: defaults and environment
    variables still apply.
    """
    if not path.exists():
        events.append(("warning", "parameters_yaml_missing", {"expected": str(path)}))
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        events.append(("error", "parameters_yaml_load_error", {"path": str(path), "error": str(exc)}))
        return {}

    if not isinstance(data, dict):
        events.append(
            ("warning", "parameters_yaml_not_dict", {"path": str(path), "type": type(data).__name__})
        )
        return {}

    events.append(("info", "parameters_yaml_loaded", {"path": str(path)}))
    return data


def _merge_env(
    settings_cls: type[BaseSettings],
    yaml_data: Dict[str, Any],
    events: List[_LoadEvent],
) -> Dict[str, Any]:
    # Env overrides are validated as one set: a single invalid variable
    # discards ALL of them and the YAML values apply.
    try:
        env_data = settings_cls().model_dump(exclude_unset=True)
        events.append(("info", "settings_loaded_env_only_partial", {"fields": list(env_data.keys())}))
    except ValidationError as exc:
        events.append(("warning", "settings_env_validation_error", {"errors": exc.errors()}))
        env_data = {}

    return {**yaml_data, **env_data}


def _load_sources(settings_cls: type[BaseSettings], path: Path) -> Dict[str, Any]:
    """Merge YAML + env, configure logging from the result, then log the load."""
    events: List[_LoadEvent] = []
    merged = _merge_env(settings_cls, _load_yaml_parameters(path, events), events)

    configure_logging(
        str(merged.get("log_level") or "INFO"),
        str(merged.get("log_format") or "console"),
    )
    for level, event, context in events:
        getattr(logger, level)(event, **context)

    return merged


@lru_cache(maxsize=1)
def get_inner_settings() -> InnerSettings:
    """
    Construct and return the validated inner service settings.

    Cached: one Settings object per process. Also configures logging.
    """
    merged = _load_sources(InnerSettings, INNER_PARAMETERS_PATH)
    settings = InnerSettings.model_validate(merged)

    logger.info(
        "settings_loaded",
        service_name=settings.service_name,
        environment=settings.environment,
        failure_probability=settings.failure_probability,
        port=settings.port,
    )
    return settings


@lru_cache(maxsize=1)
def get_edge_settings() -> EdgeSettings:
    """
    Construct and return the validated edge service settings.

    Cached: one Settings object per process. Also configures logging.

    Raises:
        RuntimeError: inner_service_url is not configured anywhere.
    """
    merged = _load_sources(EdgeSettings, EDGE_PARAMETERS_PATH)

    if not merged.get("inner_service_url"):
        logger.error("settings_missing_required_urls", missing=["inner_service_url"])
        raise RuntimeError(
            "Missing required setting: inner_service_url. "
            "Set it either in the environment variable EDGE_SERVICE_INNER_SERVICE_URL "
            f"or in {EDGE_PARAMETERS_PATH}."
        )

    settings = EdgeSettings.model_validate(merged)

    logger.info(
        "settings_loaded",
        service_name=settings.service_name,
        environment=settings.environment,
        inner_service_url=str(settings.inner_service_url),
        inner_service_timeout_seconds=settings.inner_service_timeout_seconds,
        port=settings.port,
    )
    return settings
