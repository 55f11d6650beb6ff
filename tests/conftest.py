"""Fake AWS clients shared by the tests."""

from __future__ import annotations

import asyncio
import threading

import pytest
from botocore.exceptions import ClientError

from jacktrip_fargate.config import ENV_VARS

TASK_ARN = "arn:aws:ecs:us-east-1:123456789012:task/jacktrip/0123456789abcdef"


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


async def no_sleep(_delay: float) -> None:
    await asyncio.sleep(0)


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class FakeEc2:
    def __init__(
        self,
        subnets: list[str] | None = None,
        groups: list[str] | None = None,
        public_ips: dict[str, str | None] | None = None,
    ) -> None:
        self.subnets = ["subnet-1", "subnet-2"] if subnets is None else subnets
        self.groups = ["sg-1", "sg-2"] if groups is None else groups
        self.public_ips = {"eni-1": "203.0.113.7"} if public_ips is None else public_ips
        self.calls: list[tuple[str, dict]] = []

    def describe_subnets(self, **kwargs):
        self.calls.append(("describe_subnets", kwargs))
        return {"Subnets": [{"SubnetId": s} for s in self.subnets]}

    def describe_security_groups(self, **kwargs):
        self.calls.append(("describe_security_groups", kwargs))
        return {"SecurityGroups": [{"GroupId": g, "GroupName": g} for g in self.groups]}

    def describe_network_interfaces(self, **kwargs):
        self.calls.append(("describe_network_interfaces", kwargs))
        interfaces = []
        for eni_id in kwargs["NetworkInterfaceIds"]:
            iface = {"NetworkInterfaceId": eni_id}
            ip = self.public_ips.get(eni_id)
            if ip:
                iface["Association"] = {"PublicIp": ip}
            interfaces.append(iface)
        return {"NetworkInterfaces": interfaces}


class FakeEcs:
    """Scripted ECS client.

    ``statuses`` is consumed one entry per describe_tasks call; the last entry
    repeats. ``None`` makes describe_tasks return no task. After stop_task the
    ``stop_statuses`` script is used instead. The container reports a network
    interface once more than ``eni_after`` RUNNING describes have happened.
    """

    def __init__(
        self,
        statuses,
        *,
        stop_statuses=("STOPPED",),
        eni_after: int = 0,
        eni_id: str = "eni-1",
        failures: list[dict] | None = None,
    ) -> None:
        self.statuses = list(statuses)
        self.stop_statuses = list(stop_statuses)
        self.eni_after = eni_after
        self.eni_id = eni_id
        self.failures = failures or []
        self.run_calls: list[dict] = []
        self.stop_calls: list[dict] = []
        self.describe_calls = 0
        self._running_polls = 0
        self._stopped = False
        self._lock = threading.Lock()

    def run_task(self, **kwargs):
        self.run_calls.append(kwargs)
        if self.failures:
            return {"tasks": [], "failures": self.failures}
        return {"tasks": [{"taskArn": TASK_ARN, "lastStatus": "PROVISIONING"}], "failures": []}

    def describe_tasks(self, **kwargs):
        with self._lock:
            self.describe_calls += 1
            script = self.stop_statuses if self._stopped else self.statuses
            status = script.pop(0) if len(script) > 1 else script[0]
            if status is None:
                return {"tasks": [], "failures": [{"arn": TASK_ARN, "reason": "MISSING"}]}
            if status == "RUNNING":
                self._running_polls += 1
            attached = status == "RUNNING" and self._running_polls > self.eni_after
            return {"tasks": [self._task(status, attached)], "failures": []}

    def stop_task(self, **kwargs):
        with self._lock:
            self.stop_calls.append(kwargs)
            self._stopped = True
        return {"task": {"taskArn": TASK_ARN, "desiredStatus": "STOPPED"}}

    def _task(self, status: str, attached: bool) -> dict:
        return {
            "taskArn": TASK_ARN,
            "lastStatus": status,
            "poll": self.describe_calls,
            "attachments": [
                {
                    "type": "ElasticNetworkInterface",
                    "details": [
                        {"name": "subnetId", "value": "subnet-1"},
                        {"name": "networkInterfaceId", "value": self.eni_id},
                    ],
                }
            ],
            "containers": [
                {
                    "name": "jacktrip",
                    "networkInterfaces": (
                        [{"attachmentId": "att-1", "privateIpv4Address": "10.0.0.5"}]
                        if attached
                        else []
                    ),
                }
            ],
        }


class FakeLogs:
    """Scripted CloudWatch Logs client.

    Each get_log_events call takes the next script entry: a response dict or
    an exception to raise. Once the script runs out, empty pages come back.
    """

    def __init__(self, script) -> None:
        self.script = list(script)
        self.calls: list[dict] = []

    def get_log_events(self, **kwargs):
        self.calls.append(kwargs)
        if not self.script:
            return {"events": [], "nextForwardToken": "f/end", "nextBackwardToken": "b/end"}
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def page(messages: list[str], token: str) -> dict:
    return {
        "events": [{"timestamp": 0, "message": m, "ingestionTime": 0} for m in messages],
        "nextForwardToken": token,
        "nextBackwardToken": "b/" + token,
    }


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("JACKTRIP_DEBUG", raising=False)
