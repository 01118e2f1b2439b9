"""
Exceptions raised by the build trigger and completion handlers
"""

from typing import List, Optional


class BuildHandlerError(Exception):
    """Base exception for all build handler errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(BuildHandlerError):
    """The custom resource event is missing a required value."""


class UnsupportedRequestTypeError(BuildHandlerError):
    """The custom resource event carries an unknown RequestType."""

    def __init__(self, request_type: Optional[str]) -> None:
        super().__init__(f"Unsupported request type: {request_type}")
        self.request_type = request_type


class NoExecutionFoundError(BuildHandlerError):
    """CodeBuild has no builds for the project yet."""

    def __init__(self, project_name: str) -> None:
        super().__init__(f"No builds found for project: {project_name}")
        self.project_name = project_name


class ExecutionDetailsNotFoundError(BuildHandlerError):
    """BatchGetBuilds returned nothing for a listed build id."""

    def __init__(self, build_id: str) -> None:
        super().__init__(f"Build details not found for Build ID: {build_id}")
        self.build_id = build_id


class BuildFailedError(BuildHandlerError):
    """The build reached a terminal failure status.

    ``log_lines`` holds the tail of the build log in chronological order, or is
    empty when the log could not be retrieved.
    """

    def __init__(self, status: str, log_lines: Optional[List[str]] = None) -> None:
        self.status = status
        self.log_lines = list(log_lines or [])
        if self.log_lines:
            message = (
                f"Build failed with status: {status}\n"
                f"Last {len(self.log_lines)} build logs:\n" + "\n".join(self.log_lines)
            )
        else:
            message = f"Build failed with status: {status}, but logs are not available."
        super().__init__(message)


class UnrecognizedStatusError(BuildHandlerError):
    """The build reported a status the poller does not know."""

    def __init__(self, status: Optional[str]) -> None:
        super().__init__(f"Unknown build status: {status}")
        self.status = status
