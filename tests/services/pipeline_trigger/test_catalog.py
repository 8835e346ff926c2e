from __future__ import annotations

from pathlib import Path

import pytest

from pipeline_trigger.catalog import (
    build_pipeline_catalog,
    load_pipeline_catalog_file,
    load_pipeline_catalog_text,
    pipeline_name_prefix,
)
from pipeline_trigger.errors import ConfigurationInvalid


def test_name_prefix_strips_handler_marker() -> None:
    assert pipeline_name_prefix("shop-dev-main-pipeline-handler") == "shop-dev-main-"
    assert pipeline_name_prefix("standalone") == "standalone"
    assert pipeline_name_prefix(None) == ""


def test_catalog_applies_naming_convention_and_keeps_order() -> None:
    catalog = build_pipeline_catalog(
        [
            {"name": "api", "path": "services/api/", "type": "backend"},
            {"name": "web", "path": "frontend/"},
        ],
        name_prefix="shop-dev-main-",
    )

    assert [rule.pipeline_id for rule in catalog] == [
        "shop-dev-main-api-pipeline",
        "shop-dev-main-web-pipeline",
    ]
    assert catalog.rules[0].kind == "backend"
    assert catalog.rules[1].kind is None
    assert catalog.rules[0].base_name == "api"


def test_duplicate_identifiers_are_legal() -> None:
    catalog = build_pipeline_catalog(
        [
            {"name": "api", "path": "services/api/"},
            {"name": "api", "path": "libs/api-client/"},
        ],
        name_suffix="",
    )

    assert len(catalog) == 2
    assert catalog.pipeline_ids() == ("api",)


@pytest.mark.parametrize(
    "entries",
    [
        {"name": "api", "path": "services/api/"},
        [{"name": "api"}],
        [{"name": "", "path": "services/api/"}],
        [{"name": "api", "path": ""}],
        [{"name": "api", "path": 7}],
        ["api"],
    ],
)
def test_invalid_catalog_entries_are_rejected(entries: object) -> None:
    with pytest.raises(ConfigurationInvalid):
        build_pipeline_catalog(entries)


def test_catalog_text_must_be_json() -> None:
    with pytest.raises(ConfigurationInvalid):
        load_pipeline_catalog_text("[{name: api")


def test_catalog_file_accepts_list_or_pipelines_mapping(tmp_path: Path) -> None:
    listed = tmp_path / "list.yaml"
    listed.write_text(
        """
- name: api
  path: services/api/
  type: backend
""".strip(),
        encoding="utf-8",
    )
    mapped = tmp_path / "mapped.yaml"
    mapped.write_text(
        """
pipelines:
  - name: web
    path: frontend/
""".strip(),
        encoding="utf-8",
    )

    assert load_pipeline_catalog_file(listed).pipeline_ids() == ("api-pipeline",)
    assert load_pipeline_catalog_file(mapped, name_prefix="x-").pipeline_ids() == ("x-web-pipeline",)


def test_missing_catalog_file_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationInvalid):
        load_pipeline_catalog_file(tmp_path / "absent.yaml")
