"""One hub run: launch, follow, and stop on Ctrl-C."""

# ruff: noqa: T201 - print is used for user-facing status output

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from jacktrip_fargate.aws import AwsClients, Sleep
from jacktrip_fargate.config import LaunchConfig
from jacktrip_fargate.ecs import launch_task, stop_task, wait_for_status
from jacktrip_fargate.logs import LogTailer, display_logs, pump_logs
from jacktrip_fargate.models import LaunchedTask, TaskStatus
from jacktrip_fargate.network import announce_public_ip, resolve_public_ip
from jacktrip_fargate.resources import locate_network

logger = logging.getLogger(__name__)


class TaskSession:
    """Launches the hub task and runs the concurrent follow-up work.

    Background work while the task is up: the startup flow (wait for RUNNING,
    then resolve and announce the public IP), the log tailer and the log
    display loop. The first interrupt replaces all of it with the stop
    sequence. Any background failure ends the session with that exception.
    """

    def __init__(
        self,
        config: LaunchConfig,
        clients: AwsClients,
        *,
        interrupt: asyncio.Event | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.clients = clients
        self.interrupt = interrupt or asyncio.Event()
        self.sleep = sleep
        self.task: LaunchedTask | None = None
        self.public_ip: str | None = None
        self.tailer: LogTailer | None = None
        self.queue: asyncio.Queue[str] | None = None
        self.stop_requests = 0
        # a status wait is printing progress dots on the current line
        self._mid_line = False

    async def launch(self) -> LaunchedTask:
        cfg = self.config
        network = await locate_network(self.clients.ec2, cfg.resource_tag)
        self.task = await launch_task(
            self.clients.ecs,
            cluster=cfg.cluster,
            task_definition=cfg.task_definition,
            container_name=cfg.container_name,
            network=network,
            env_overrides=cfg.env_overrides(),
        )
        return self.task

    async def _wait(self, desired: str) -> dict:
        self._mid_line = True
        description = await wait_for_status(
            self.clients.ecs,
            self.task,
            desired,
            poll_interval=self.config.poll_interval,
            timeout=self.config.wait_timeout,
            sleep=self.sleep,
        )
        self._mid_line = False
        return description

    async def _startup(self) -> None:
        await self._wait(TaskStatus.RUNNING)
        self.public_ip = await resolve_public_ip(
            self.clients.ecs,
            self.clients.ec2,
            self.task,
            poll_interval=self.config.poll_interval,
            sleep=self.sleep,
        )
        announce_public_ip(self.public_ip)

    async def shutdown(self) -> int:
        """Stop the task, wait until ECS reports it STOPPED, return exit code 0."""
        if self._mid_line:
            print()
        print(f"Stopping task {self.task.resource} !")
        self.stop_requests += 1
        await stop_task(self.clients.ecs, self.task)
        await self._wait(TaskStatus.STOPPED)
        print("BYE!")
        return 0

    async def run(self) -> int:
        """Launch the task and follow it until interrupted."""
        await self.launch()

        cfg = self.config
        self.tailer = LogTailer(
            self.clients.logs,
            log_group=cfg.log_group,
            log_stream=self.task.log_stream(cfg.log_stream_prefix, cfg.container_name),
            page_size=cfg.log_page_size,
            poll_interval=cfg.poll_interval,
            sleep=self.sleep,
        )
        self.queue = queue = asyncio.Queue(maxsize=cfg.log_buffer_size)

        interrupted = asyncio.create_task(self.interrupt.wait(), name="interrupt")
        pending = {
            interrupted,
            asyncio.create_task(self._startup(), name="startup"),
            asyncio.create_task(pump_logs(self.tailer, queue), name="log-tailer"),
            asyncio.create_task(display_logs(queue), name="log-display"),
        }

        try:
            while not interrupted.done():
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for finished in done:
                    if finished is not interrupted and finished.exception() is not None:
                        raise finished.exception()
        finally:
            await _cancel_all(pending)

        return await self.shutdown()


async def _cancel_all(tasks: set[asyncio.Task]) -> None:
    for t in tasks:
        t.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


@contextlib.contextmanager
def sigint_sets(event: asyncio.Event):
    """Route SIGINT to ``event`` on the running loop for the duration of the block."""
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, event.set)
    try:
        yield event
    finally:
        loop.remove_signal_handler(signal.SIGINT)


async def run_session(config: LaunchConfig, clients: AwsClients | None = None) -> int:
    """Entry point used by the CLI: real clients, real SIGINT."""
    clients = clients or AwsClients.for_region(config.aws_region)
    interrupt = asyncio.Event()
    session = TaskSession(config, clients, interrupt=interrupt)
    with sigint_sets(interrupt):
        try:
            return await session.run()
        except BaseException:
            if session.task is not None:
                logger.error(
                    "Task %s may still be running; stop it with: aws ecs stop-task "
                    "--cluster %s --task %s",
                    session.task.task_arn,
                    session.task.cluster,
                    session.task.task_id,
                )
            raise
