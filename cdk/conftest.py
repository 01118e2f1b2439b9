"""
Shared pytest fixtures for the builder tests
"""

import os
import sys
from typing import Any, Dict, Optional
from unittest.mock import Mock

import pytest

# The Lambda handlers are bundled as top-level modules, import them the same way
HANDLERS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                            'token_injectable_docker_builder', 'lambda_handlers')
sys.path.insert(0, HANDLERS_DIR)

PROJECT_NAME = "BuilderCodeBuildProject-abc123"
IMAGE_TAG = "0b5d1f0e-6a53-4d43-9d0e-8f7f3a1c2b44"


def make_event(request_type: str, physical_resource_id: Optional[str] = None,
               **properties: Any) -> Dict[str, Any]:
    """Build a Provider framework event for the trigger resource"""
    resource_properties = {
        "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:provider",
        "ProjectName": PROJECT_NAME,
        "ImageTag": IMAGE_TAG,
        "Trigger": "5c1b2a3d-0000-4000-8000-000000000000",
    }
    resource_properties.update(properties)
    event = {
        "RequestType": request_type,
        "LogicalResourceId": "BuildTriggerResource",
        "ResourceType": "AWS::CloudFormation::CustomResource",
        "ResourceProperties": resource_properties,
    }
    if physical_resource_id:
        event["PhysicalResourceId"] = physical_resource_id
    return event


def build_detail(status: str, build_id: str = f"{PROJECT_NAME}:1111",
                 with_logs: bool = True) -> Dict[str, Any]:
    build = {"id": build_id, "buildStatus": status}
    if with_logs:
        build["logs"] = {
            "groupName": f"/aws/codebuild/{PROJECT_NAME}",
            "streamName": "1111",
        }
    return build


@pytest.fixture
def codebuild_client():
    client = Mock()
    client.start_build.return_value = {"build": {"id": f"{PROJECT_NAME}:1111"}}
    client.list_builds_for_project.return_value = {"ids": [f"{PROJECT_NAME}:1111"]}
    client.batch_get_builds.return_value = {"builds": [build_detail("IN_PROGRESS")]}
    return client


@pytest.fixture
def logs_client():
    return Mock()


@pytest.fixture
def docker_context(tmp_path):
    """A minimal Docker build context"""
    (tmp_path / "Dockerfile").write_text("FROM public.ecr.aws/docker/library/alpine:3\n")
    return str(tmp_path)
