"""Command-line entry point for launching a JackTrip hub on ECS/Fargate.

Usage:
    jacktrip-fargate
    jacktrip-fargate --region eu-central-1 --hubpatch 4

Settings not given as flags come from the environment (a .env file in the
working directory is loaded first); see jacktrip_fargate.config.ENV_VARS.
Press Ctrl-C to stop the hub task and exit.
"""

# ruff: noqa: T201 - print is the correct output mechanism for a CLI

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from jacktrip_fargate.config import LaunchConfig
from jacktrip_fargate.errors import JacktripError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jacktrip-fargate",
        description="Run a JackTrip hub server as an ECS Fargate task and follow its logs.",
    )
    parser.add_argument(
        "--region",
        help="AWS region in which to create the jacktrip task (default: us-east-1)",
    )
    parser.add_argument(
        "--hubpatch",
        type=int,
        help=(
            "Hub auto audio patch: 0=server-to-clients, 1=client loopback, "
            "2=clients can hear all clients except themselves, 3=reserved for TUB, "
            "4=full mix, i.e. clients hear all clients including themselves (default: 2)"
        ),
    )
    parser.add_argument("--cluster", help="ECS cluster name (default: jacktrip)")
    parser.add_argument(
        "--task-definition",
        dest="task_definition",
        help="ECS task definition family (default: run-jacktrip)",
    )
    parser.add_argument("--container", help="Container name in the task (default: jacktrip)")
    parser.add_argument(
        "--log-group",
        dest="log_group",
        help="CloudWatch log group (default: /ecs/run-jacktrip)",
    )
    parser.add_argument(
        "--tag",
        help="Name tag of the subnet and security group (default: jacktrip)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for each task state change, 0 waits forever (default: 900)",
    )
    return parser


def _configure_logging() -> None:
    debug = bool(os.environ.get("JACKTRIP_DEBUG"))
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # Only show detailed logs for our own code
    logging.getLogger("jacktrip_fargate").setLevel(logging.DEBUG if debug else logging.INFO)


def load_config(args: argparse.Namespace) -> LaunchConfig:
    return LaunchConfig.from_env(
        aws_region=args.region,
        hub_patch=args.hubpatch,
        cluster=args.cluster,
        task_definition=args.task_definition,
        container_name=args.container,
        log_group=args.log_group,
        resource_tag=args.tag,
        wait_timeout=args.timeout,
    )


def main(argv: list[str] | None = None) -> None:
    from dotenv import load_dotenv

    load_dotenv()
    _configure_logging()

    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ValidationError as exc:
        print(f"ERROR: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    from jacktrip_fargate.session import run_session

    try:
        code = asyncio.run(run_session(config))
    except (JacktripError, ClientError, BotoCoreError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
