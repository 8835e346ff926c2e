"""CodePipeline trigger sink."""

from __future__ import annotations

import logging
from typing import Any

from .aws import build_client, error_code, error_detail
from .errors import TriggerFailed


logger = logging.getLogger("pipeline_trigger.codepipeline")


class CodePipelineTriggerSink:
    def __init__(
        self,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._client = client or build_client("codepipeline", region=region, endpoint_url=endpoint_url)

    def start_execution(self, pipeline_id: str, *, request_token: str | None = None) -> str:
        request: dict[str, Any] = {"name": pipeline_id}
        if request_token:
            request["clientRequestToken"] = request_token
        try:
            response = self._client.start_pipeline_execution(**request)
        except Exception as exc:
            logger.warning(
                "CodePipeline start_pipeline_execution failed pipeline=%s code=%s detail=%s",
                pipeline_id,
                error_code(exc),
                error_detail(exc),
            )
            raise TriggerFailed(pipeline_id, f"{error_code(exc)}: {error_detail(exc)}") from exc
        execution_id = response.get("pipelineExecutionId")
        if not execution_id:
            raise TriggerFailed(pipeline_id, "response carried no pipelineExecutionId")
        return str(execution_id)
