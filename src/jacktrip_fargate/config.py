"""Launch configuration loaded from environment variables and CLI flags."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Environment variable for each configurable field.
ENV_VARS = {
    "aws_region": "AWS_REGION",
    "cluster": "JACKTRIP_CLUSTER",
    "task_definition": "JACKTRIP_TASK_DEF",
    "container_name": "JACKTRIP_CONTAINER",
    "log_group": "JACKTRIP_LOG_GROUP",
    "log_stream_prefix": "JACKTRIP_LOG_STREAM_PREFIX",
    "resource_tag": "JACKTRIP_TAG",
    "hub_patch": "JACKTRIP_HUB_PATCH",
    "poll_interval": "JACKTRIP_POLL_INTERVAL",
    "wait_timeout": "JACKTRIP_WAIT_TIMEOUT",
}


class LaunchConfig(BaseModel):
    """Everything needed to launch and follow one JackTrip hub task."""

    aws_region: str = Field(default="us-east-1")
    cluster: str = Field(default="jacktrip", description="ECS cluster name")
    task_definition: str = Field(default="run-jacktrip", description="ECS task definition family")
    container_name: str = Field(default="jacktrip", description="Container to override")
    log_group: str = Field(default="/ecs/run-jacktrip", description="CloudWatch log group")
    log_stream_prefix: str = Field(default="ecs", description="awslogs-stream-prefix")
    resource_tag: str = Field(
        default="jacktrip",
        description="Name tag of the subnet and security group to launch into",
    )
    hub_patch: int = Field(
        default=2,
        ge=0,
        le=4,
        description=(
            "Hub auto audio patch: 0=server-to-clients, 1=client loopback, "
            "2=clients hear all clients except themselves, 3=reserved for TUB, 4=full mix"
        ),
    )
    poll_interval: float = Field(default=1.0, ge=0)
    wait_timeout: float | None = Field(default=900.0, gt=0)
    log_page_size: int = Field(default=100, ge=1, le=10000)
    log_buffer_size: int = Field(default=1000, ge=1)

    @field_validator(
        "aws_region",
        "cluster",
        "task_definition",
        "container_name",
        "log_group",
        "log_stream_prefix",
        "resource_tag",
    )
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("wait_timeout", mode="before")
    @classmethod
    def _zero_means_forever(cls, value: Any) -> Any:
        if value is None:
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return value  # rejected by the float validation
        return None if number == 0 else value

    @classmethod
    def from_env(cls, **overrides: Any) -> LaunchConfig:
        """Load configuration from environment variables.

        Keyword overrides (typically CLI flags) win over the environment;
        ``None`` means "not given". A ``wait_timeout`` of 0 disables the
        deadline.
        """
        data: dict[str, Any] = {}
        for field, var in ENV_VARS.items():
            raw = os.environ.get(var)
            if raw is not None and raw.strip():
                data[field] = raw
        data.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**data)

    def env_overrides(self) -> dict[str, str]:
        """Container environment passed to the hub task."""
        return {"HUB_PATCH": str(self.hub_patch)}
