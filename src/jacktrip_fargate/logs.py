"""Tail the hub container's CloudWatch log stream to the console.

The tailer pages strictly forward through the stream with ``nextForwardToken``
and hands lines to a single display loop over a bounded queue. A full queue
blocks the tailer, so a slow console throttles fetching instead of buffering
without limit.
"""

# ruff: noqa: T201 - print is used for user-facing status output

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from botocore.exceptions import ClientError

from jacktrip_fargate.aws import Sleep, call_aws
from jacktrip_fargate.errors import is_not_found

logger = logging.getLogger(__name__)

LINE_PREFIX = ">>> "


@dataclass
class LogCursor:
    """Position in the log stream: last forward token and lines seen so far."""

    next_token: str | None = None
    lines_seen: int = 0


class LogTailer:
    """Lazy, infinite reader of one CloudWatch log stream."""

    def __init__(
        self,
        logs_client,
        *,
        log_group: str,
        log_stream: str,
        page_size: int = 100,
        poll_interval: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._logs = logs_client
        self.log_group = log_group
        self.log_stream = log_stream
        self.page_size = page_size
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.cursor = LogCursor()
        self._started = False

    async def _fetch(self) -> dict:
        kwargs: dict = {
            "logGroupName": self.log_group,
            "logStreamName": self.log_stream,
            "limit": self.page_size,
            "startFromHead": True,
        }
        # Until something has been read, re-read from the head.
        if self.cursor.lines_seen > 0 and self.cursor.next_token:
            kwargs["nextToken"] = self.cursor.next_token
        return await call_aws(self._logs.get_log_events, **kwargs)

    async def _first_page(self) -> dict:
        """Fetch until the log stream exists (the container may not have logged yet)."""
        attempts = 0
        while True:
            try:
                return await self._fetch()
            except ClientError as exc:
                if not is_not_found(exc):
                    raise
            attempts += 1
            if attempts == 1:
                logger.info("Log stream %s does not exist yet, waiting", self.log_stream)
            await self._sleep(0)

    async def lines(self) -> AsyncIterator[str]:
        """Yield log messages in arrival order, forever.

        Can only be iterated once.
        """
        if self._started:
            raise RuntimeError("LogTailer.lines() can only be consumed once")
        self._started = True

        response = await self._first_page()
        while True:
            events = response.get("events", [])
            self.cursor.next_token = response.get("nextForwardToken")
            for event in events:
                self.cursor.lines_seen += 1
                yield event["message"].rstrip("\n")

            if not events:
                await self._sleep(self.poll_interval)
            response = await self._fetch()


async def pump_logs(tailer: LogTailer, queue: asyncio.Queue[str]) -> None:
    """Feed every tailed line into ``queue``; blocks while the queue is full."""
    async for line in tailer.lines():
        await queue.put(line)


async def display_logs(queue: asyncio.Queue[str]) -> None:
    """Print queued log lines with the ``>>> `` prefix until cancelled."""
    while True:
        line = await queue.get()
        print(f"{LINE_PREFIX}{line}", flush=True)
        queue.task_done()
