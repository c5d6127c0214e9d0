"""
Default VPC / subnet / security group placeholders.

AWS puts resources without explicit placement in the account's default VPC,
default subnet and default security group. When a module declares none of
these, tfviz draws synthetic stand-ins so every resource has a container and
every security group reference has a node.
"""
from dataclasses import dataclass
from typing import Iterable

from tfviz.diagnostics import Diagnostics
from tfviz.models.graph import Graph
from tfviz.topology import names
from tfviz.topology.store import UndefinedGroupRegistry

ANCHOR_ATTRS = {"shape": "point", "style": "invis"}


@dataclass(frozen=True)
class DeclaredKinds:
    has_vpc: bool
    has_subnet: bool
    has_security_group: bool

    @classmethod
    def of(cls, resource_types: Iterable[str]) -> "DeclaredKinds":
        types = set(resource_types)
        return cls(
            has_vpc="aws_vpc" in types,
            has_subnet="aws_subnet" in types,
            has_security_group="aws_security_group" in types,
        )


def _add_anchor(graph: Graph, anchor: str, diags: Diagnostics) -> None:
    diags.verbose(f"AddNode: {anchor} to {names.cluster_id(anchor)}")
    graph.add_node(names.cluster_id(anchor), anchor, ANCHOR_ATTRS)


def create_default_vpc(graph: Graph, diags: Diagnostics) -> str:
    cluster = names.cluster_id(names.DEFAULT_VPC)
    diags.verbose(f"AddSubGraph: {cluster} to {names.ROOT} // Create Default VPC")
    graph.add_cluster(names.ROOT, cluster, {"label": "VPC: default"})
    _add_anchor(graph, names.DEFAULT_VPC, diags)
    return cluster


def create_default_subnet(graph: Graph, parent: str, diags: Diagnostics) -> str:
    cluster = names.cluster_id(names.DEFAULT_SUBNET)
    diags.verbose(f"AddSubGraph: {cluster} to {parent} // Create Default Subnet")
    graph.add_cluster(parent, cluster, {"label": "Subnet: default"})
    _add_anchor(graph, names.DEFAULT_SUBNET, diags)
    return cluster


def create_default_security_group(graph: Graph, diags: Diagnostics) -> None:
    diags.verbose(f"AddNode: {names.DEFAULT_SECURITY_GROUP} to {names.ROOT} // Create default Security Group")
    graph.add_node(names.ROOT, names.DEFAULT_SECURITY_GROUP, {
        "style": "dotted",
        "label": names.DEFAULT_SECURITY_GROUP,
    })


def create_default_nodes(
    kinds: DeclaredKinds,
    graph: Graph,
    registry: UndefinedGroupRegistry,
    diags: Diagnostics,
) -> None:
    """Create the placeholders the declared resource kinds leave missing."""
    if not kinds.has_vpc:
        create_default_vpc(graph, diags)

    if not kinds.has_subnet:
        # a subnet must sit in some VPC-level container
        parent = names.cluster_id(names.DEFAULT_VPC) if not kinds.has_vpc else names.ROOT
        create_default_subnet(graph, parent, diags)

    if not kinds.has_security_group:
        create_default_security_group(graph, diags)
        registry.register(names.DEFAULT_SECURITY_GROUP)


def ensure_default_vpc(graph: Graph, diags: Diagnostics) -> str:
    cluster = names.cluster_id(names.DEFAULT_VPC)
    if not graph.has_cluster(cluster):
        create_default_vpc(graph, diags)
    return cluster


def ensure_default_subnet(graph: Graph, diags: Diagnostics) -> str:
    cluster = names.cluster_id(names.DEFAULT_SUBNET)
    if not graph.has_cluster(cluster):
        parent = names.cluster_id(names.DEFAULT_VPC)
        if not graph.has_cluster(parent):
            parent = names.ROOT
        create_default_subnet(graph, parent, diags)
    return cluster


def ensure_default_security_group(graph: Graph, registry: UndefinedGroupRegistry, diags: Diagnostics) -> None:
    if names.DEFAULT_SECURITY_GROUP not in registry:
        create_default_security_group(graph, diags)
        registry.register(names.DEFAULT_SECURITY_GROUP)
