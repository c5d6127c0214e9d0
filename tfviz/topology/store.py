"""
Resource store: typed records for every supported resource of a module.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from tfviz.diagnostics import Diagnostics
from tfviz.models.aws import (
    AutoscalingGroup,
    DBInstance,
    DBSubnetGroup,
    Instance,
    LoadBalancer,
    SecurityGroup,
    Subnet,
    Vpc,
)
from tfviz.models.module import ManagedResource, Module
from tfviz.topology.context import Context
from tfviz.topology.decode import decode_body

# Terraform type -> (record type, store attribute)
RESOURCE_TYPES = {
    "aws_vpc":               (Vpc, "vpcs"),
    "aws_subnet":            (Subnet, "subnets"),
    "aws_instance":          (Instance, "instances"),
    "aws_db_instance":       (DBInstance, "db_instances"),
    "aws_db_subnet_group":   (DBSubnetGroup, "db_subnet_groups"),
    "aws_lb":                (LoadBalancer, "load_balancers"),
    "aws_alb":               (LoadBalancer, "load_balancers"),
    "aws_autoscaling_group": (AutoscalingGroup, "autoscaling_groups"),
    "aws_security_group":    (SecurityGroup, "security_groups"),
}


@dataclass
class ResourceStore:
    vpcs: Dict[str, Vpc] = field(default_factory=dict)
    subnets: Dict[str, Subnet] = field(default_factory=dict)
    instances: Dict[str, Instance] = field(default_factory=dict)
    db_instances: Dict[str, DBInstance] = field(default_factory=dict)
    db_subnet_groups: Dict[str, DBSubnetGroup] = field(default_factory=dict)
    load_balancers: Dict[str, LoadBalancer] = field(default_factory=dict)
    autoscaling_groups: Dict[str, AutoscalingGroup] = field(default_factory=dict)
    # keyed by qualified name ("aws_security_group.web"), the form attachments use
    security_groups: Dict[str, SecurityGroup] = field(default_factory=dict)
    # security group identifier -> ordered set of attached resources ("aws_instance.web")
    membership: Dict[str, List[str]] = field(default_factory=dict)
    # "type.name" of every resource tfviz cannot draw
    unsupported: List[str] = field(default_factory=list)

    def add_member(self, group: str, resource: str) -> None:
        members = self.membership.setdefault(group, [])
        if resource not in members:
            members.append(resource)

    def members_of(self, group: str) -> List[str]:
        return list(self.membership.get(group, []))


def _decode(resource: ManagedResource, ctx: Context, diags: Diagnostics):
    record_type, _ = RESOURCE_TYPES[resource.resource_type]
    diags.verbose(f"Decoding {resource.qualified_name}")
    record, problems = decode_body(record_type, resource.body, ctx)
    for p in problems:
        diags.warning(p, subject=resource.qualified_name)
    return record


def decode_resources(module: Module, ctx: Context, diags: Diagnostics) -> ResourceStore:
    """
    Decode every managed resource of ``module``. Security group membership
    is recorded while decoding instances and databases, so it is complete
    only once this function returns.
    """
    store = ResourceStore()

    for r in module.managed_resources:
        if r.resource_type not in RESOURCE_TYPES:
            diags.verbose(f"Can't decode {r.qualified_name} (not yet supported)")
            store.unsupported.append(r.qualified_name)
            continue

        record = _decode(r, ctx, diags)

        if isinstance(record, SecurityGroup):
            store.security_groups[r.qualified_name] = record
            continue

        if isinstance(record, LoadBalancer):
            lb_type = record.load_balancer_type
            if lb_type is not None and lb_type != "application":
                diags.verbose(f"Load balancer type '{lb_type}' is not yet supported", subject=r.qualified_name)
                store.unsupported.append(r.qualified_name)
                continue

        if isinstance(record, (Instance, DBInstance)):
            for sg in record.attached_security_groups:
                store.add_member(sg, r.qualified_name)

        _, attr = RESOURCE_TYPES[r.resource_type]
        getattr(store, attr)[r.name] = record

    return store


class UndefinedGroupRegistry:
    """Security groups drawn as placeholders because no declaration exists."""

    def __init__(self):
        self._groups: List[str] = []

    def __contains__(self, group: str) -> bool:
        return group in self._groups

    def register(self, group: str) -> bool:
        """Record ``group``; return False if it was already registered."""
        if group in self._groups:
            return False
        self._groups.append(group)
        return True
