"""Look up the subnet and security group the hub is launched into."""

from __future__ import annotations

import logging

from jacktrip_fargate.aws import call_aws
from jacktrip_fargate.errors import ResourceLookupError
from jacktrip_fargate.models import NetworkResources

logger = logging.getLogger(__name__)


def _name_filter(tag: str) -> list[dict]:
    return [{"Name": "tag:Name", "Values": [tag]}]


async def locate_network(ec2, tag: str) -> NetworkResources:
    """Return the first subnet and first security group tagged ``Name=<tag>``."""
    subnets = await call_aws(ec2.describe_subnets, Filters=_name_filter(tag))
    groups = await call_aws(ec2.describe_security_groups, Filters=_name_filter(tag))

    if not subnets.get("Subnets"):
        raise ResourceLookupError(f"no subnet tagged Name={tag!r}")
    if not groups.get("SecurityGroups"):
        raise ResourceLookupError(f"no security group tagged Name={tag!r}")

    resources = NetworkResources(
        subnet_id=subnets["Subnets"][0]["SubnetId"],
        security_group_id=groups["SecurityGroups"][0]["GroupId"],
    )
    logger.info(
        "Using subnet %s and security group %s",
        resources.subnet_id,
        resources.security_group_id,
    )
    return resources
