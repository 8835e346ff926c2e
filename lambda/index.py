from pipeline_trigger.handler import handler  # noqa: F401
