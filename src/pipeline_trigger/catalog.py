"""Pipeline catalog loader and naming convention."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Iterator

import yaml

from .errors import ConfigurationInvalid


DEFAULT_HANDLER_MARKER = "pipeline-handler"
DEFAULT_NAME_SUFFIX = "-pipeline"


@dataclass(frozen=True)
class PipelineRule:
    pipeline_id: str
    prefix: str
    base_name: str
    kind: str | None = None


@dataclass(frozen=True)
class PipelineCatalog:
    rules: tuple[PipelineRule, ...]

    def pipeline_ids(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(rule.pipeline_id for rule in self.rules))

    def __iter__(self) -> Iterator[PipelineRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def pipeline_name_prefix(function_name: str | None, marker: str = DEFAULT_HANDLER_MARKER) -> str:
    """Environment prefix of this deployment, e.g. ``svc-dev-main-`` for ``svc-dev-main-pipeline-handler``."""
    name = str(function_name or "")
    if not marker:
        return name
    return name.split(marker, 1)[0]


def build_pipeline_catalog(
    entries: Any,
    *,
    name_prefix: str = "",
    name_suffix: str = DEFAULT_NAME_SUFFIX,
) -> PipelineCatalog:
    if not isinstance(entries, list):
        raise ConfigurationInvalid("pipeline catalog must be a list of {name, path, type} entries")
    rules: list[PipelineRule] = []
    for index, item in enumerate(entries):
        if not isinstance(item, dict):
            raise ConfigurationInvalid(f"pipelines[{index}] must be a mapping")
        base_name = _required_text(item.get("name"), f"pipelines[{index}].name")
        prefix = item.get("path")
        if not isinstance(prefix, str) or not prefix.strip():
            raise ConfigurationInvalid(f"pipelines[{index}].path must be a non-empty string")
        kind = item.get("type")
        rules.append(
            PipelineRule(
                pipeline_id=f"{name_prefix}{base_name}{name_suffix}",
                prefix=prefix,
                base_name=base_name,
                kind=str(kind).strip() if kind not in (None, "") else None,
            )
        )
    return PipelineCatalog(rules=tuple(rules))


def load_pipeline_catalog_text(
    text: str,
    *,
    name_prefix: str = "",
    name_suffix: str = DEFAULT_NAME_SUFFIX,
) -> PipelineCatalog:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationInvalid(f"cannot parse pipeline catalog JSON: {exc}") from exc
    return build_pipeline_catalog(payload, name_prefix=name_prefix, name_suffix=name_suffix)


def load_pipeline_catalog_file(
    path: Path,
    *,
    name_prefix: str = "",
    name_suffix: str = DEFAULT_NAME_SUFFIX,
) -> PipelineCatalog:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationInvalid(f"cannot read pipeline catalog {str(path)!r}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationInvalid(f"cannot parse pipeline catalog {str(path)!r}: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("pipelines")
    return build_pipeline_catalog(payload, name_prefix=name_prefix, name_suffix=name_suffix)


def _required_text(value: Any, field_name: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ConfigurationInvalid(f"{field_name} must be non-empty")
    return text
