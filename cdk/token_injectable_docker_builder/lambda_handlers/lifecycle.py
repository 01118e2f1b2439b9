"""
Custom resource lifecycle helpers shared by the trigger and completion handlers
"""

import json
import logging
import os
from enum import Enum
from typing import Any, Dict

from errors import ConfigurationError, UnsupportedRequestTypeError


class RequestType(Enum):
    """CloudFormation custom resource request types."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "RequestType":
        raw = event.get("RequestType")
        try:
            return cls(raw)
        except ValueError:
            raise UnsupportedRequestTypeError(raw) from None


class BuildStatus(Enum):
    """CodeBuild build statuses the completion handler knows about."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    FAULT = "FAULT"
    FAULTED = "FAULTED"
    STOPPED = "STOPPED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_running(self) -> bool:
        return self in (BuildStatus.PENDING, BuildStatus.IN_PROGRESS)

    @property
    def is_failure(self) -> bool:
        return self in (
            BuildStatus.FAILED,
            BuildStatus.FAULT,
            BuildStatus.FAULTED,
            BuildStatus.STOPPED,
            BuildStatus.TIMED_OUT,
        )


def get_logger(name: str) -> logging.Logger:
    """Return a logger at the level named by LOG_LEVEL (INFO by default)"""
    logger = logging.getLogger(name)
    logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    return logger


def log_event(logger: logging.Logger, label: str, event: Dict[str, Any]) -> None:
    logger.info("%s event: %s", label, json.dumps(event, indent=2, default=str))


def get_project_name(event: Dict[str, Any]) -> str:
    """Read the CodeBuild project name from the resource properties"""
    project_name = event.get("ResourceProperties", {}).get("ProjectName")
    if not project_name:
        raise ConfigurationError("ProjectName is required in ResourceProperties")
    return project_name


def get_physical_resource_id(event: Dict[str, Any]) -> str:
    # Create events carry no PhysicalResourceId yet
    return event.get("PhysicalResourceId") or event.get("LogicalResourceId")
