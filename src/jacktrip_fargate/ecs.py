"""ECS Fargate task launch, status polling and stop."""

# ruff: noqa: T201 - print is used for user-facing status output

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from jacktrip_fargate.aws import Sleep, call_aws
from jacktrip_fargate.errors import TaskLaunchError, WaitTimeoutError
from jacktrip_fargate.models import LaunchedTask, NetworkResources

logger = logging.getLogger(__name__)


async def launch_task(
    ecs,
    *,
    cluster: str,
    task_definition: str,
    container_name: str,
    network: NetworkResources,
    env_overrides: dict[str, str],
) -> LaunchedTask:
    """Launch one Fargate task with a public IP and return it."""
    env = [{"name": k, "value": v} for k, v in env_overrides.items()]

    response = await call_aws(
        ecs.run_task,
        cluster=cluster,
        taskDefinition=task_definition,
        launchType="FARGATE",
        networkConfiguration={
            "awsvpcConfiguration": {
                "subnets": [network.subnet_id],
                "securityGroups": [network.security_group_id],
                "assignPublicIp": "ENABLED",
            },
        },
        overrides={
            "containerOverrides": [
                {
                    "name": container_name,
                    "environment": env,
                },
            ],
        },
        count=1,
    )

    failures = response.get("failures", [])
    if failures:
        raise TaskLaunchError(f"ECS run_task failed: {failures}")
    if not response.get("tasks"):
        raise TaskLaunchError("ECS run_task returned no task")

    task = LaunchedTask(task_arn=response["tasks"][0]["taskArn"], cluster=cluster)
    print(f"Launched ECS task: {task.task_arn}")
    return task


async def describe_task(ecs, task: LaunchedTask) -> dict | None:
    """Return the current task description, or None if ECS doesn't list it yet."""
    response = await call_aws(ecs.describe_tasks, cluster=task.cluster, tasks=[task.task_arn])
    tasks = response.get("tasks", [])
    return tasks[0] if tasks else None


async def wait_for_status(
    ecs,
    task: LaunchedTask,
    desired: str,
    *,
    poll_interval: float = 1.0,
    timeout: float | None = None,
    sleep: Sleep = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> dict:
    """Poll an ECS task until its lastStatus equals ``desired``.

    Prints one progress dot per poll that did not match. Returns the task
    description from the first matching poll.
    Raises WaitTimeoutError if ``timeout`` seconds pass first.
    """
    print(f"Waiting for task {task.resource} to reach state {desired} ", end="", flush=True)
    deadline = None if timeout is None else clock() + timeout

    while True:
        description = await describe_task(ecs, task)
        if description is None:
            logger.warning("task %s not found, retrying", task.task_id)
        else:
            status = description.get("lastStatus", "UNKNOWN")
            logger.debug("task %s status %s", task.task_id, status)
            if status == desired:
                print(" done!")
                return description

        if deadline is not None and clock() >= deadline:
            print()
            raise WaitTimeoutError(
                f"ECS task {task.task_arn} did not reach {desired} within {timeout}s"
            )

        print(".", end="", flush=True)
        await sleep(poll_interval)


async def stop_task(
    ecs,
    task: LaunchedTask,
    *,
    reason: str = "Stopped from jacktrip-fargate",
) -> None:
    await call_aws(ecs.stop_task, cluster=task.cluster, task=task.task_arn, reason=reason)
    logger.info("Stop requested for task %s", task.task_id)
