"""Exceptions raised by the launcher."""

from __future__ import annotations

from botocore.exceptions import ClientError


class JacktripError(Exception):
    """Base class for launcher errors."""


class ResourceLookupError(JacktripError):
    """No subnet or security group carries the configured Name tag."""


class TaskLaunchError(JacktripError):
    """ECS refused to start the task."""


class NetworkResolutionError(JacktripError):
    """The running task's public IP could not be determined."""


class WaitTimeoutError(JacktripError, TimeoutError):
    """A task did not reach the desired status before the deadline."""


def error_code(exc: BaseException) -> str:
    """Return the AWS error code of a ClientError, or "" for anything else."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def is_not_found(exc: BaseException) -> bool:
    return error_code(exc) == "ResourceNotFoundException"
