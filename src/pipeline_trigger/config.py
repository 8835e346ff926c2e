"""Invocation configuration loaded from the process environment."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping

from .catalog import (
    DEFAULT_HANDLER_MARKER,
    DEFAULT_NAME_SUFFIX,
    PipelineCatalog,
    load_pipeline_catalog_file,
    load_pipeline_catalog_text,
    pipeline_name_prefix,
)
from .errors import ConfigurationInvalid


logger = logging.getLogger("pipeline_trigger.config")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class InvocationConfig:
    catalog: PipelineCatalog
    name_prefix: str
    max_workers: int = 4
    include_deletions: bool = False
    deadline_reserve_ms: int = 1000
    log_level: str = "INFO"
    region: str | None = None
    endpoint_url: str | None = None


def load_invocation_config(environ: Mapping[str, str] | None = None) -> InvocationConfig:
    env = os.environ if environ is None else environ

    name_prefix = env.get("PIPELINE_NAME_PREFIX")
    if name_prefix is None:
        function_name = env.get("AWS_LAMBDA_FUNCTION_NAME")
        if not function_name:
            logger.warning("AWS_LAMBDA_FUNCTION_NAME not set; pipeline names carry no environment prefix")
        name_prefix = pipeline_name_prefix(
            function_name,
            env.get("PIPELINE_HANDLER_MARKER") or DEFAULT_HANDLER_MARKER,
        )
    name_suffix = env.get("PIPELINE_NAME_SUFFIX", DEFAULT_NAME_SUFFIX)

    catalog = _load_catalog(env, name_prefix=name_prefix, name_suffix=name_suffix)

    max_workers = _int_setting(env, "PIPELINE_TRIGGER_MAX_WORKERS", 4)
    if max_workers < 1:
        raise ConfigurationInvalid("PIPELINE_TRIGGER_MAX_WORKERS must be >= 1")
    reserve_ms = _int_setting(env, "PIPELINE_TRIGGER_DEADLINE_RESERVE_MS", 1000)
    if reserve_ms < 0:
        raise ConfigurationInvalid("PIPELINE_TRIGGER_DEADLINE_RESERVE_MS must be >= 0")

    log_level = (env.get("PIPELINE_TRIGGER_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationInvalid(f"unknown PIPELINE_TRIGGER_LOG_LEVEL: {log_level!r}")

    return InvocationConfig(
        catalog=catalog,
        name_prefix=name_prefix,
        max_workers=max_workers,
        include_deletions=_bool_setting(env, "PIPELINE_TRIGGER_INCLUDE_DELETIONS", False),
        deadline_reserve_ms=reserve_ms,
        log_level=log_level,
        region=env.get("AWS_DEFAULT_REGION") or env.get("AWS_REGION") or None,
        endpoint_url=env.get("AWS_ENDPOINT_URL") or None,
    )


def _load_catalog(env: Mapping[str, str], *, name_prefix: str, name_suffix: str) -> PipelineCatalog:
    for key in ("PIPELINES", "PIPELINE_MAP"):
        text = (env.get(key) or "").strip()
        if text:
            return load_pipeline_catalog_text(text, name_prefix=name_prefix, name_suffix=name_suffix)
    catalog_path = (env.get("PIPELINES_FILE") or "").strip()
    if catalog_path:
        return load_pipeline_catalog_file(Path(catalog_path), name_prefix=name_prefix, name_suffix=name_suffix)
    raise ConfigurationInvalid("PIPELINES environment variable is missing")


def _int_setting(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationInvalid(f"{key} must be an integer, got {raw!r}") from exc


def _bool_setting(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationInvalid(f"{key} must be a boolean, got {raw!r}")
