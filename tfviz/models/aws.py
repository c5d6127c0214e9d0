"""
Typed records for the AWS resources tfviz understands.

Each field carries the HCL argument it is decoded from (``hcl``), whether the
argument is required, and for nested blocks the record type of the block.
Arguments that are not listed here are ignored by the decoder.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional


def _attr(hcl: str, required: bool = False, default: Any = None) -> Any:
    return field(default=default, metadata={"hcl": hcl, "required": required})


def _blocks(hcl: str, block_type: type) -> Any:
    return field(default_factory=list, metadata={"hcl": hcl, "block": block_type})


@dataclass
class SecurityGroupRule:
    # The start port (or ICMP type number if protocol is "icmp" or "icmpv6")
    from_port: int = _attr("from_port", required=True, default=0)
    # The end range port (or ICMP code if protocol is "icmp")
    to_port: int = _attr("to_port", required=True, default=0)
    # icmp, icmpv6, tcp, udp, "-1" (all)
    protocol: str = _attr("protocol", required=True, default="")
    cidr_blocks: Optional[List[str]] = _attr("cidr_blocks")
    ipv6_cidr_blocks: Optional[List[str]] = _attr("ipv6_cidr_blocks")
    # If true, members of the group itself are a source/destination
    self_reference: Optional[bool] = _attr("self")
    security_groups: Optional[List[str]] = _attr("security_groups")

    @property
    def literal_cidrs(self) -> List[str]:
        return list(self.cidr_blocks or []) + list(self.ipv6_cidr_blocks or [])


@dataclass
class Vpc:
    cidr_block: str = _attr("cidr_block", required=True, default="")


@dataclass
class Subnet:
    cidr_block: str = _attr("cidr_block", required=True, default="")
    vpc_id: str = _attr("vpc_id", required=True, default="")


@dataclass
class Instance:
    instance_type: str = _attr("instance_type", required=True, default="")
    ami: str = _attr("ami", required=True, default="")
    # Security group names (EC2-Classic) or IDs (default VPC)
    security_groups: Optional[List[str]] = _attr("security_groups")
    vpc_security_group_ids: Optional[List[str]] = _attr("vpc_security_group_ids")
    subnet_id: Optional[str] = _attr("subnet_id")

    @property
    def attached_security_groups(self) -> List[str]:
        return list(self.security_groups or []) + list(self.vpc_security_group_ids or [])


@dataclass
class DBInstance:
    allocated_storage: Optional[int] = _attr("allocated_storage")
    db_subnet_group_name: Optional[str] = _attr("db_subnet_group_name")
    engine: Optional[str] = _attr("engine")
    instance_class: Optional[str] = _attr("instance_class")
    publicly_accessible: Optional[bool] = _attr("publicly_accessible")
    vpc_security_group_ids: Optional[List[str]] = _attr("vpc_security_group_ids")

    @property
    def attached_security_groups(self) -> List[str]:
        return list(self.vpc_security_group_ids or [])


@dataclass
class DBSubnetGroup:
    subnet_ids: List[str] = _attr("subnet_ids", required=True, default=None)


@dataclass
class LoadBalancer:
    # "application" or "network"
    load_balancer_type: Optional[str] = _attr("load_balancer_type")
    security_groups: Optional[List[str]] = _attr("security_groups")
    subnets: Optional[List[str]] = _attr("subnets")


@dataclass
class AutoscalingGroup:
    max_size: int = _attr("max_size", required=True, default=0)
    min_size: int = _attr("min_size", required=True, default=0)
    launch_configuration: Optional[str] = _attr("launch_configuration")
    target_group_arns: Optional[List[str]] = _attr("target_group_arns")
    vpc_zone_identifier: Optional[List[str]] = _attr("vpc_zone_identifier")


@dataclass
class SecurityGroup:
    vpc_id: Optional[str] = _attr("vpc_id")
    ingress: List[SecurityGroupRule] = _blocks("ingress", SecurityGroupRule)
    egress: List[SecurityGroupRule] = _blocks("egress", SecurityGroupRule)
