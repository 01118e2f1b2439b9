"""
onEvent handler for the build trigger custom resource.

Starts one CodeBuild build for the project named in the resource properties on
Create and Update, and does nothing on Delete. The handler never waits for the
build; the isComplete handler takes over from here.
"""

from typing import Any, Dict

import boto3
from botocore.exceptions import ClientError

from lifecycle import (
    RequestType,
    get_logger,
    get_physical_resource_id,
    get_project_name,
    log_event,
)

logger = get_logger(__name__)


def trigger(event: Dict[str, Any], codebuild) -> Dict[str, Any]:
    """Handle one lifecycle event against the given CodeBuild client"""
    request_type = RequestType.from_event(event)
    physical_resource_id = get_physical_resource_id(event)

    if request_type in (RequestType.CREATE, RequestType.UPDATE):
        project_name = get_project_name(event)
        try:
            response = codebuild.start_build(projectName=project_name)
        except ClientError as e:
            logger.error(f"Error starting build for {project_name}: {e}")
            return {
                "PhysicalResourceId": physical_resource_id,
                "Data": {},
                "Reason": str(e),
            }
        build_id = response.get("build", {}).get("id")
        logger.info(f"Started build {build_id} for project {project_name}")
    elif request_type is RequestType.DELETE:
        logger.info("Delete request received. No action required.")

    return {
        "PhysicalResourceId": physical_resource_id,
        "Data": {},
    }


def handler(event, context):
    log_event(logger, "onEvent", event)
    return trigger(event, boto3.client("codebuild"))
