"""
Graph nodes and clusters for the decoded resources.

VPCs and subnets become nested clusters, each with an invisible anchor node
that edges can point at. Instances, databases, load balancers and
autoscaling groups become nodes inside the cluster they are placed in.
"""
import os
from typing import Dict, List, Optional

from tfviz.config import Config
from tfviz.diagnostics import Diagnostics
from tfviz.models.aws import AutoscalingGroup, DBInstance, Instance, LoadBalancer, Subnet
from tfviz.models.graph import Graph, GraphError
from tfviz.topology import defaults, names
from tfviz.topology.store import ResourceStore

_ICONS = {
    "aws_instance": ("ec2.png", "box"),
    "aws_db_instance": ("db.png", "cylinder"),
    "aws_lb": ("alb.png", "hexagon"),
    "aws_autoscaling_group": ("asg.png", "box3d"),
}


class NodeMaterializer:
    def __init__(self, graph: Graph, store: ResourceStore, config: Config, diags: Diagnostics):
        self.graph = graph
        self.store = store
        self.config = config
        self.diags = diags

    # ------------------------------------------------------------ helpers
    def _resource_attrs(self, kind: str, name: str) -> Dict[str, str]:
        icon, shape = _ICONS[kind]
        attrs = {"label": names.wrap_label(name)}
        if self.config.icons_dir:
            attrs.update({
                "image": os.path.join(self.config.icons_dir, icon),
                "width": "1",
                "height": "1",
                "fixedsize": "true",
                "shape": "none",
            })
        else:
            attrs["shape"] = shape
        return attrs

    def _add_resource(self, cluster: str, kind: str, name: str, attrs: Dict[str, str]) -> None:
        node = f"{kind}_{name}"
        self.diags.verbose(f"AddNode: {node} to {cluster}")
        self.graph.add_node(cluster, node, attrs)

    def _vpc_cluster(self, vpc_ref: Optional[str], subject: str) -> str:
        """Cluster of a declared VPC, or the default VPC for anything else."""
        if vpc_ref and vpc_ref.startswith("aws_vpc.") and names.ref_name(vpc_ref) in self.store.vpcs:
            return names.cluster_id(names.node_id(vpc_ref))
        if vpc_ref:
            self.diags.warning(f"VPC '{vpc_ref}' is not declared, using the default VPC", subject=subject)
        return defaults.ensure_default_vpc(self.graph, self.diags)

    def _subnet_cluster(self, subnet_ref: Optional[str], subject: str) -> str:
        """Cluster of a declared subnet, or the default subnet for anything else."""
        if subnet_ref and subnet_ref.startswith("aws_subnet.") and names.ref_name(subnet_ref) in self.store.subnets:
            return names.cluster_id(names.node_id(subnet_ref))
        if subnet_ref:
            self.diags.warning(f"Subnet '{subnet_ref}' is not declared, using the default subnet", subject=subject)
        return defaults.ensure_default_subnet(self.graph, self.diags)

    # ------------------------------------------------------------ containers
    def create_vpc(self, name: str) -> None:
        anchor = names.vpc_anchor(name)
        cluster = names.cluster_id(anchor)
        self.diags.verbose(f"AddSubGraph: {cluster} to {names.ROOT} // Create VPC")
        self.graph.add_cluster(names.ROOT, cluster, {
            "label": "VPC: " + name,
            "style": "rounded",
            "bgcolor": "#EDF1F2",
            "labeljust": "l",
        })
        self.graph.add_node(cluster, anchor, defaults.ANCHOR_ATTRS)

    def create_subnet(self, name: str, subnet: Subnet) -> None:
        parent = self._vpc_cluster(subnet.vpc_id, f"aws_subnet.{name}")
        anchor = names.subnet_anchor(name)
        cluster = names.cluster_id(anchor)
        self.diags.verbose(f"AddSubGraph: {cluster} to {parent} // Create Subnet")
        self.graph.add_cluster(parent, cluster, {
            "label": "Subnet: " + name,
            "style": "rounded",
            "bgcolor": "white",
            "labeljust": "l",
        })
        self.graph.add_node(cluster, anchor, defaults.ANCHOR_ATTRS)

    # ------------------------------------------------------------ resources
    def create_instance(self, name: str, instance: Instance) -> None:
        if instance.subnet_id is None:
            cluster = defaults.ensure_default_subnet(self.graph, self.diags)
        else:
            cluster = self._subnet_cluster(instance.subnet_id, f"aws_instance.{name}")
        self._add_resource(cluster, "aws_instance", name, self._resource_attrs("aws_instance", name))

    def create_db_instance(self, name: str, db: DBInstance) -> None:
        subject = f"aws_db_instance.{name}"
        # databases are placed per VPC; without a subnet group or any VPC
        # they land in the default VPC
        if db.db_subnet_group_name is None or not self.store.vpcs:
            cluster = defaults.ensure_default_vpc(self.graph, self.diags)
        else:
            cluster = self._db_vpc_cluster(db.db_subnet_group_name, subject)

        attrs = self._resource_attrs("aws_db_instance", name)
        attrs["fontcolor"] = "red" if db.publicly_accessible else "black"
        self._add_resource(cluster, "aws_db_instance", name, attrs)

    def _db_vpc_cluster(self, group_ref: str, subject: str) -> str:
        group = self.store.db_subnet_groups.get(names.ref_name(group_ref))
        if group is None or not group.subnet_ids:
            self.diags.warning(f"DB subnet group '{group_ref}' has no usable subnet, using the default VPC", subject=subject)
            return defaults.ensure_default_vpc(self.graph, self.diags)

        # only the first subnet of the group is used for placement
        subnet = self.store.subnets.get(names.ref_name(group.subnet_ids[0]))
        if subnet is None:
            self.diags.warning(f"Subnet '{group.subnet_ids[0]}' is not declared, using the default VPC", subject=subject)
            return defaults.ensure_default_vpc(self.graph, self.diags)
        return self._vpc_cluster(subnet.vpc_id, subject)

    def _first_subnet_cluster(self, subnet_refs: Optional[List[str]], subject: str) -> str:
        # multi-subnet placement is not drawn: the first subnet wins
        if not subnet_refs or not self.store.subnets:
            return defaults.ensure_default_subnet(self.graph, self.diags)
        return self._subnet_cluster(subnet_refs[0], subject)

    def create_load_balancer(self, name: str, lb: LoadBalancer) -> None:
        cluster = self._first_subnet_cluster(lb.subnets, f"aws_lb.{name}")
        self._add_resource(cluster, "aws_lb", name, self._resource_attrs("aws_lb", name))

    def create_autoscaling_group(self, name: str, asg: AutoscalingGroup) -> None:
        cluster = self._first_subnet_cluster(asg.vpc_zone_identifier, f"aws_autoscaling_group.{name}")
        self._add_resource(
            cluster, "aws_autoscaling_group", name,
            self._resource_attrs("aws_autoscaling_group", name),
        )

    # ------------------------------------------------------------ entry point
    def materialize(self) -> int:
        """
        Create every cluster and node. A resource that cannot be added is
        reported and skipped; returns the number of failures.
        """
        steps = (
            [(f"aws_vpc.{n}", self.create_vpc, (n,)) for n in self.store.vpcs]
            + [(f"aws_subnet.{n}", self.create_subnet, (n, s)) for n, s in self.store.subnets.items()]
            + [(f"aws_instance.{n}", self.create_instance, (n, i)) for n, i in self.store.instances.items()]
            + [(f"aws_db_instance.{n}", self.create_db_instance, (n, d)) for n, d in self.store.db_instances.items()]
            + [(f"aws_lb.{n}", self.create_load_balancer, (n, lb)) for n, lb in self.store.load_balancers.items()]
            + [
                (f"aws_autoscaling_group.{n}", self.create_autoscaling_group, (n, a))
                for n, a in self.store.autoscaling_groups.items()
            ]
        )

        failures = 0
        for subject, fn, args in steps:
            try:
                fn(*args)
            except GraphError as exc:
                self.diags.error(str(exc), subject=subject)
                failures += 1
        return failures
