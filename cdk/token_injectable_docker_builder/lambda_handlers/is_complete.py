"""
isComplete handler for the build trigger custom resource.

Called by the Provider framework on a fixed interval after onEvent returns.
Looks at the newest build of the project and reports whether it finished:

* still running: ``{"IsComplete": False}``
* succeeded: ``{"IsComplete": True, "Data": {"artifactTag": <image tag>}}``
* failed: raises BuildFailedError with the tail of the build log

Every call is a pure read against CodeBuild and CloudWatch Logs.
"""

import os
from typing import Any, Dict, List

import boto3

from errors import (
    BuildFailedError,
    ConfigurationError,
    ExecutionDetailsNotFoundError,
    NoExecutionFoundError,
    UnrecognizedStatusError,
)
from lifecycle import BuildStatus, RequestType, get_logger, get_project_name, log_event

logger = get_logger(__name__)

LOG_TAIL_SIZE = 5
ARTIFACT_TAG_KEY = "artifactTag"


def get_image_tag(event: Dict[str, Any]) -> str:
    image_tag = event.get("ResourceProperties", {}).get("ImageTag") or os.environ.get("IMAGE_TAG")
    if not image_tag:
        raise ConfigurationError("ImageTag is required in ResourceProperties or the IMAGE_TAG environment")
    return image_tag


def get_latest_build(codebuild, project_name: str) -> Dict[str, Any]:
    """Return the build details of the most recent build of a project"""
    # CodeBuild orders newest first; index 0 is trusted as the latest
    response = codebuild.list_builds_for_project(
        projectName=project_name,
        sortOrder="DESCENDING",
    )
    build_ids = response.get("ids") or []
    if not build_ids:
        raise NoExecutionFoundError(project_name)

    build_id = build_ids[0]
    logger.info(f"Latest Build ID: {build_id}")

    builds = codebuild.batch_get_builds(ids=[build_id]).get("builds") or []
    if not builds:
        raise ExecutionDetailsNotFoundError(build_id)
    return builds[0]


def get_log_tail(logs, group_name: str, stream_name: str, limit: int = LOG_TAIL_SIZE) -> List[str]:
    """Fetch the last ``limit`` log messages of a stream, oldest first"""
    response = logs.get_log_events(
        logGroupName=group_name,
        logStreamName=stream_name,
        startFromHead=False,
        limit=limit,
    )
    events = sorted(response.get("events", []), key=lambda e: e.get("timestamp", 0))
    return [e.get("message", "").rstrip("\n") for e in events[-limit:]]


def build_failure(build: Dict[str, Any], status: str, logs) -> BuildFailedError:
    logs_info = build.get("logs") or {}
    group_name = logs_info.get("groupName")
    stream_name = logs_info.get("streamName")
    if not (group_name and stream_name):
        return BuildFailedError(status)

    logger.info(f"Retrieving logs from CloudWatch Logs Group: {group_name}, Stream: {stream_name}")
    try:
        log_lines = get_log_tail(logs, group_name, stream_name)
    except Exception as e:
        # Keep the build failure as the reported error
        logger.warning(f"Could not retrieve build logs: {e}")
        return BuildFailedError(status)
    return BuildFailedError(status, log_lines)


def poll(event: Dict[str, Any], codebuild, logs) -> Dict[str, Any]:
    """Report whether the newest build for the resource's project has finished"""
    request_type = RequestType.from_event(event)

    if request_type is RequestType.DELETE:
        # Nothing was started, nothing to wait for
        return {"IsComplete": True}

    project_name = get_project_name(event)
    image_tag = get_image_tag(event)
    logger.info(f"Checking status for CodeBuild project: {project_name}")

    build = get_latest_build(codebuild, project_name)
    raw_status = build.get("buildStatus")
    logger.info(f"Build Status: {raw_status}")

    try:
        status = BuildStatus(raw_status)
    except ValueError:
        error = UnrecognizedStatusError(raw_status)
        logger.error(error.message)
        raise error from None

    if status.is_running:
        logger.info("Build is still in progress.")
        return {"IsComplete": False}

    if status is BuildStatus.SUCCEEDED:
        logger.info(f"Build succeeded, image tag {image_tag}")
        return {"IsComplete": True, "Data": {ARTIFACT_TAG_KEY: image_tag}}

    if status.is_failure:
        error = build_failure(build, status.value, logs)
        logger.error(error.message)
        raise error

    raise UnrecognizedStatusError(raw_status)


def handler(event, context):
    log_event(logger, "isComplete", event)
    return poll(event, boto3.client("codebuild"), boto3.client("logs"))
