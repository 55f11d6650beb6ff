"""boto3 clients and the thread hop used to call them from the event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from botocore.config import Config

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

# botocore retries throttling, 5xx and connection errors; 5 requests per call at most.
RETRY_CONFIG = Config(retries={"total_max_attempts": 5, "mode": "standard"})


@dataclass
class AwsClients:
    """boto3 clients used by a session."""

    ec2: object
    ecs: object
    logs: object

    @classmethod
    def for_region(cls, region: str) -> AwsClients:
        import boto3

        session = boto3.Session(region_name=region)
        return cls(
            ec2=session.client("ec2", config=RETRY_CONFIG),
            ecs=session.client("ecs", config=RETRY_CONFIG),
            logs=session.client("logs", config=RETRY_CONFIG),
        )


async def call_aws(method: Callable[..., dict], /, **kwargs: Any) -> dict:
    """Call a blocking boto3 client method in a worker thread."""
    logger.debug("AWS call %s", getattr(method, "__name__", method))
    return await asyncio.to_thread(method, **kwargs)
