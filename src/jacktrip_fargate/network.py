"""Find the public IP of a running Fargate task."""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console

from jacktrip_fargate.aws import Sleep, call_aws
from jacktrip_fargate.ecs import describe_task
from jacktrip_fargate.errors import NetworkResolutionError
from jacktrip_fargate.models import LaunchedTask

logger = logging.getLogger(__name__)

ENI_ATTACHMENT = "ElasticNetworkInterface"


def _has_network_interface(description: dict | None) -> bool:
    if not description:
        return False
    containers = description.get("containers", [])
    return bool(containers and containers[0].get("networkInterfaces"))


def eni_id_from_task(description: dict) -> str | None:
    """Return the networkInterfaceId detail of the task's ENI attachment."""
    for attachment in description.get("attachments", []):
        if attachment.get("type") != ENI_ATTACHMENT:
            continue
        for detail in attachment.get("details", []):
            if detail.get("name") == "networkInterfaceId":
                return detail.get("value")
    return None


async def resolve_public_ip(
    ecs,
    ec2,
    task: LaunchedTask,
    *,
    poll_interval: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> str:
    """Wait for the task's network interface to attach and return its public IP."""
    description = await describe_task(ecs, task)
    while not _has_network_interface(description):
        logger.debug("no network interface on task %s yet", task.task_id)
        await sleep(poll_interval)
        description = await describe_task(ecs, task)

    eni_id = eni_id_from_task(description)
    if not eni_id:
        raise NetworkResolutionError(f"task {task.task_arn} has no {ENI_ATTACHMENT} attachment")

    response = await call_aws(ec2.describe_network_interfaces, NetworkInterfaceIds=[eni_id])
    interfaces = response.get("NetworkInterfaces", [])
    public_ip = interfaces[0].get("Association", {}).get("PublicIp") if interfaces else None
    if not public_ip:
        raise NetworkResolutionError(f"network interface {eni_id} has no public IP")

    logger.info("Task %s is reachable at %s (%s)", task.task_id, public_ip, eni_id)
    return public_ip


def announce_public_ip(public_ip: str, console: Console | None = None) -> None:
    console = console or Console(highlight=False)
    console.print()
    console.print("This jacktrip server's IP is ", end="")
    console.print(public_ip, style="bold red")
