"""
Security group links.

For every instance and database, the ingress and egress rules of each
attached security group become edges:

- ``0.0.0.0/0`` (and ``::/0``) links the resource with the Internet node,
  highlighted in red;
- any other CIDR links it with the subnet containing the address, else the
  VPC containing it, else a standalone node named after the CIDR;
- ``self = true`` links it with the other members of the same group;
- ``security_groups = [...]`` links it with the members of those groups.

Ingress edges point towards the resource, egress edges away from it.
Only one hop is modelled per rule.
"""
import ipaddress
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from tfviz.config import Config
from tfviz.diagnostics import Diagnostics
from tfviz.models.aws import SecurityGroupRule
from tfviz.models.graph import Graph, GraphError
from tfviz.topology import defaults, names
from tfviz.topology.store import ResourceStore, UndefinedGroupRegistry

PUBLIC_CIDRS = ("0.0.0.0/0", "::/0")
INTERNET_EDGE_ATTRS = {"color": "red"}

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class Direction(str, Enum):
    INGRESS = "ingress"
    EGRESS = "egress"


class SecurityGroupLinker:
    def __init__(
        self,
        graph: Graph,
        store: ResourceStore,
        registry: UndefinedGroupRegistry,
        config: Config,
        diags: Diagnostics,
    ):
        self.graph = graph
        self.store = store
        self.registry = registry
        self.config = config
        self.diags = diags
        self._subnet_nets: Optional[List[Tuple[str, Network]]] = None
        self._vpc_nets: Optional[List[Tuple[str, Network]]] = None

    # ------------------------------------------------------------ helpers
    @property
    def directions(self) -> List[Direction]:
        dirs = []
        if not self.config.ignore_ingress:
            dirs.append(Direction.INGRESS)
        if not self.config.ignore_egress:
            dirs.append(Direction.EGRESS)
        return dirs

    def _link(self, direction: Direction, peer: str, node: str, attrs: Optional[Dict[str, str]] = None) -> None:
        if direction == Direction.INGRESS:
            src, dst = peer, node
        else:
            src, dst = node, peer
        self.diags.verbose(f"AddEdge: {src} -> {dst}")
        self.graph.add_edge(src, dst, attrs)

    def _parse_networks(self, records: Dict, kind: str) -> List[Tuple[str, Network]]:
        nets = []
        for name, record in records.items():
            try:
                nets.append((name, ipaddress.ip_network(record.cidr_block, strict=False)))
            except ValueError:
                self.diags.warning(f"invalid CIDR block '{record.cidr_block}', ignored for rule matching", subject=f"{kind}.{name}")
        return nets

    def subnet_networks(self) -> List[Tuple[str, Network]]:
        if self._subnet_nets is None:
            self._subnet_nets = self._parse_networks(self.store.subnets, "aws_subnet")
        return self._subnet_nets

    def vpc_networks(self) -> List[Tuple[str, Network]]:
        if self._vpc_nets is None:
            self._vpc_nets = self._parse_networks(self.store.vpcs, "aws_vpc")
        return self._vpc_nets

    def containing_anchor(self, address) -> Optional[str]:
        """
        Anchor of the most specific declared container of ``address``:
        subnets are checked before VPCs, and the first match wins.
        """
        for name, net in self.subnet_networks():
            if address in net:
                return names.subnet_anchor(name)
        for name, net in self.vpc_networks():
            if address in net:
                return names.vpc_anchor(name)
        return None

    # ------------------------------------------------------------ rule parts
    def link_cidr(self, direction: Direction, node: str, cidr: str) -> None:
        if cidr in PUBLIC_CIDRS:
            self._link(direction, names.INTERNET, node, INTERNET_EDGE_ATTRS)
            return

        try:
            address = ipaddress.ip_interface(cidr).ip
        except ValueError:
            self.diags.error(f"invalid CIDR address: {cidr}", subject=node)
            return

        anchor = self.containing_anchor(address)
        if anchor is not None:
            self._link(direction, anchor, node)
            return

        # an address outside every modelled network (on-premises, partner...)
        if not self.graph.has_node(cidr):
            self.diags.verbose(f"AddNode: {cidr} to {names.ROOT}")
            self.graph.add_node(names.ROOT, cidr, {"label": cidr})
        self._link(direction, cidr, node)

    def link_members(self, direction: Direction, node: str, group: str) -> None:
        for member in self.store.members_of(group):
            peer = names.node_id(member)
            if peer != node:
                self._link(direction, peer, node)

    def resolve_rule(self, direction: Direction, node: str, group: str, rule: SecurityGroupRule) -> None:
        for cidr in rule.literal_cidrs:
            self.link_cidr(direction, node, cidr)

        if rule.self_reference:
            self.link_members(direction, node, group)

        for ref in rule.security_groups or []:
            self.link_members(direction, node, ref)

    def resolve_group(self, direction: Direction, node: str, group: str) -> None:
        sg = self.store.security_groups.get(group)
        if sg is None:
            # not declared in the module: draw it as a placeholder
            if group not in self.registry:
                self.diags.verbose(f"AddNode: {group} to {names.ROOT}")
                self.graph.add_node(names.ROOT, group, {"style": "dotted", "label": group})
                self.registry.register(group)
            # the node is created once, but every attached resource gets its
            # own edge so later members of the group stay connected
            self._link(direction, group, node)
            return

        rules = sg.ingress if direction == Direction.INGRESS else sg.egress
        for rule in rules:
            self.resolve_rule(direction, node, group, rule)

    def link_default_group(self, node: str) -> None:
        """A resource without security group is governed by the default one."""
        defaults.ensure_default_security_group(self.graph, self.registry, self.diags)
        self._link(Direction.INGRESS, names.DEFAULT_SECURITY_GROUP, node)

    # ------------------------------------------------------------ entry point
    def _attempt(self, subject: str, fn, *args) -> bool:
        try:
            fn(*args)
        except GraphError as exc:
            self.diags.error(str(exc), subject=subject)
            return False
        return True

    def _resources(self):
        for name, inst in self.store.instances.items():
            yield f"aws_instance.{name}", inst.attached_security_groups, True
        for name, db in self.store.db_instances.items():
            yield f"aws_db_instance.{name}", db.attached_security_groups, False

    def resolve_links(self) -> int:
        """Create every security group edge; returns the number of failures."""
        failures = 0
        for ref, groups, inherits_default in self._resources():
            node = names.node_id(ref)
            if not self.graph.has_node(node):
                self.diags.verbose("no node in graph, skipping security group links", subject=ref)
                continue

            if not groups and inherits_default and Direction.INGRESS in self.directions:
                failures += not self._attempt(ref, self.link_default_group, node)

            for group in groups:
                for direction in self.directions:
                    failures += not self._attempt(ref, self.resolve_group, direction, node, group)
        return failures
