"""Data models for a JackTrip hub launch."""

from __future__ import annotations

import enum

from pydantic import BaseModel


class TaskStatus(enum.StrEnum):
    """ECS task lifecycle values (``lastStatus``)."""

    PROVISIONING = "PROVISIONING"
    PENDING = "PENDING"
    ACTIVATING = "ACTIVATING"
    RUNNING = "RUNNING"
    DEACTIVATING = "DEACTIVATING"
    STOPPING = "STOPPING"
    DEPROVISIONING = "DEPROVISIONING"
    STOPPED = "STOPPED"


class NetworkResources(BaseModel, frozen=True):
    """Subnet and security group the task is launched into."""

    subnet_id: str
    security_group_id: str


class LaunchedTask(BaseModel, frozen=True):
    """The one ECS task started by a run.

    ARN format: arn:aws:ecs:region:account:task/cluster/task-id
    """

    task_arn: str
    cluster: str

    @property
    def resource(self) -> str:
        """The ARN resource part, e.g. ``task/jacktrip/0123abcd``."""
        return self.task_arn.split(":", 5)[-1]

    @property
    def task_id(self) -> str:
        return self.task_arn.rsplit("/", 1)[-1]

    def log_stream(self, prefix: str, container_name: str) -> str:
        """awslogs stream name: prefix/container/task-id."""
        return f"{prefix}/{container_name}/{self.task_id}"
