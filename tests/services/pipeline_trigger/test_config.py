from __future__ import annotations

import json
from pathlib import Path

import pytest

from pipeline_trigger.config import load_invocation_config
from pipeline_trigger.errors import ConfigurationInvalid


PIPELINES = json.dumps(
    [
        {"name": "api", "path": "services/api/", "type": "backend"},
        {"name": "web", "path": "frontend/", "type": "frontend"},
    ]
)


def test_config_derives_names_from_function_name() -> None:
    config = load_invocation_config(
        {
            "PIPELINES": PIPELINES,
            "AWS_LAMBDA_FUNCTION_NAME": "shop-dev-main-pipeline-handler",
            "AWS_REGION": "eu-west-1",
        }
    )

    assert config.name_prefix == "shop-dev-main-"
    assert config.catalog.pipeline_ids() == ("shop-dev-main-api-pipeline", "shop-dev-main-web-pipeline")
    assert config.max_workers == 4
    assert config.include_deletions is False
    assert config.region == "eu-west-1"
    assert config.log_level == "INFO"


def test_explicit_prefix_and_suffix_override_derivation() -> None:
    config = load_invocation_config(
        {
            "PIPELINES": PIPELINES,
            "AWS_LAMBDA_FUNCTION_NAME": "shop-dev-main-pipeline-handler",
            "PIPELINE_NAME_PREFIX": "",
            "PIPELINE_NAME_SUFFIX": "-cd",
        }
    )

    assert config.catalog.pipeline_ids() == ("api-cd", "web-cd")


def test_pipeline_map_and_file_are_fallback_sources(tmp_path: Path) -> None:
    from_map = load_invocation_config({"PIPELINE_MAP": PIPELINES})
    assert from_map.catalog.pipeline_ids() == ("api-pipeline", "web-pipeline")

    catalog_path = tmp_path / "pipelines.yaml"
    catalog_path.write_text("pipelines:\n  - name: docs\n    path: docs/\n", encoding="utf-8")
    from_file = load_invocation_config({"PIPELINES_FILE": str(catalog_path)})
    assert from_file.catalog.pipeline_ids() == ("docs-pipeline",)


def test_missing_catalog_is_configuration_invalid() -> None:
    with pytest.raises(ConfigurationInvalid):
        load_invocation_config({"AWS_LAMBDA_FUNCTION_NAME": "x-pipeline-handler"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"PIPELINES": "not-json"},
        {"PIPELINE_TRIGGER_MAX_WORKERS": "many"},
        {"PIPELINE_TRIGGER_MAX_WORKERS": "0"},
        {"PIPELINE_TRIGGER_INCLUDE_DELETIONS": "maybe"},
        {"PIPELINE_TRIGGER_DEADLINE_RESERVE_MS": "-5"},
        {"PIPELINE_TRIGGER_LOG_LEVEL": "LOUD"},
    ],
)
def test_unparsable_settings_are_configuration_invalid(overrides: dict[str, str]) -> None:
    env = {"PIPELINES": PIPELINES}
    env.update(overrides)

    with pytest.raises(ConfigurationInvalid):
        load_invocation_config(env)


def test_tuning_settings_are_parsed() -> None:
    config = load_invocation_config(
        {
            "PIPELINES": PIPELINES,
            "PIPELINE_TRIGGER_MAX_WORKERS": "8",
            "PIPELINE_TRIGGER_INCLUDE_DELETIONS": "true",
            "PIPELINE_TRIGGER_DEADLINE_RESERVE_MS": "2500",
            "PIPELINE_TRIGGER_LOG_LEVEL": "debug",
        }
    )

    assert config.max_workers == 8
    assert config.include_deletions is True
    assert config.deadline_reserve_ms == 2500
    assert config.log_level == "DEBUG"
