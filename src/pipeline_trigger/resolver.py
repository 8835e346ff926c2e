"""Changed paths to pipeline target set."""

from __future__ import annotations

from typing import Iterable

from .catalog import PipelineCatalog, PipelineRule


def resolve(paths: Iterable[str], catalog: PipelineCatalog) -> frozenset[str]:
    """Pipelines whose prefix is a literal prefix of at least one changed path.

    Matching is character-wise, not path-segment aware, and a path equal to
    the prefix matches. Rules sharing a pipeline id collapse to one target.
    """
    candidates = tuple(paths)
    targets: set[str] = set()
    for rule in catalog:
        if rule.pipeline_id in targets:
            continue
        if _first_match(rule, candidates) is not None:
            targets.add(rule.pipeline_id)
    return frozenset(targets)


def explain(paths: Iterable[str], catalog: PipelineCatalog) -> dict[str, tuple[tuple[str, str], ...]]:
    """Matched ``(prefix, first_matching_path)`` pairs keyed by pipeline id."""
    candidates = tuple(paths)
    matches: dict[str, list[tuple[str, str]]] = {}
    for rule in catalog:
        path = _first_match(rule, candidates)
        if path is not None:
            matches.setdefault(rule.pipeline_id, []).append((rule.prefix, path))
    return {pipeline_id: tuple(pairs) for pipeline_id, pairs in matches.items()}


def _first_match(rule: PipelineRule, paths: tuple[str, ...]) -> str | None:
    for path in paths:
        if path.startswith(rule.prefix):
            return path
    return None
