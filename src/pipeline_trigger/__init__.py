"""Commit-driven CodePipeline trigger: changed paths to pipeline starts."""

from .catalog import (
    PipelineCatalog,
    PipelineRule,
    build_pipeline_catalog,
    load_pipeline_catalog_file,
    load_pipeline_catalog_text,
    pipeline_name_prefix,
)
from .config import InvocationConfig, load_invocation_config
from .deadline import Deadline
from .dispatcher import DispatchReport, Dispatcher, TriggerOutcome, TriggerSink
from .errors import (
    ConfigurationInvalid,
    DiffRetrievalFailed,
    DispatchFailed,
    EventInvalid,
    InvocationTimeout,
    PipelineTriggerError,
    TriggerFailed,
)
from .event import CommitEvent
from .paths import CommitRange, DiffEntry, DiffPage, DiffSource, PathCollection, PathSet, collect_changed_paths
from .resolver import explain, resolve

__all__ = [
    "CommitEvent",
    "CommitRange",
    "ConfigurationInvalid",
    "Deadline",
    "DiffEntry",
    "DiffPage",
    "DiffRetrievalFailed",
    "DiffSource",
    "DispatchFailed",
    "DispatchReport",
    "Dispatcher",
    "EventInvalid",
    "InvocationConfig",
    "InvocationTimeout",
    "PathCollection",
    "PathSet",
    "PipelineCatalog",
    "PipelineRule",
    "PipelineTriggerError",
    "TriggerFailed",
    "TriggerOutcome",
    "TriggerSink",
    "build_pipeline_catalog",
    "collect_changed_paths",
    "explain",
    "load_invocation_config",
    "load_pipeline_catalog_file",
    "load_pipeline_catalog_text",
    "pipeline_name_prefix",
    "resolve",
]
