"""
Topology tests — default placeholders, names and node placement.
"""
import io

from rich.console import Console

from tfviz.config import Config
from tfviz.diagnostics import Diagnostics
from tfviz.models.graph import Graph
from tfviz.models.module import ManagedResource, Module
from tfviz.topology import names
from tfviz.topology.defaults import (
    DeclaredKinds,
    create_default_nodes,
    ensure_default_security_group,
    ensure_default_subnet,
    ensure_default_vpc,
)
from tfviz.topology.engine import Synthesizer
from tfviz.topology.store import UndefinedGroupRegistry


def _diags():
    return Diagnostics(console=Console(file=io.StringIO()))


def _module(*resources):
    return Module(
        source_dir=".",
        managed_resources=[ManagedResource(t, n, body) for t, n, body in resources],
    )


def _build(*resources, config=None):
    synth = Synthesizer(_module(*resources), config or Config(), _diags())
    synth.decode_all()
    return synth.build(), synth


def _vpc(name, cidr="10.0.0.0/16"):
    return ("aws_vpc", name, {"cidr_block": cidr})


def _subnet(name, cidr, vpc="main"):
    return ("aws_subnet", name, {"cidr_block": cidr, "vpc_id": f"${{aws_vpc.{vpc}.id}}"})


def _instance(name, subnet=None, groups=None):
    body = {"ami": "ami-1", "instance_type": "t2.micro"}
    if subnet:
        body["subnet_id"] = f"${{aws_subnet.{subnet}.id}}"
    if groups is not None:
        body["vpc_security_group_ids"] = groups
    return ("aws_instance", name, body)


class TestNames:
    def test_node_id(self):
        assert names.node_id("aws_instance.web") == "aws_instance_web"

    def test_cluster_id(self):
        assert names.cluster_id(names.vpc_anchor("main")) == "cluster_aws_vpc_main"
        assert names.cluster_id(names.subnet_anchor("a")) == "cluster_aws_subnet_a"

    def test_ref_name(self):
        assert names.ref_name("aws_subnet.private") == "private"
        assert names.ref_name("subnet-123") == "subnet-123"

    def test_wrap_label(self):
        assert names.wrap_label("web") == "web"
        assert names.wrap_label("abcdefgh") == "abcdefgh"
        assert names.wrap_label("webserver01") == "webserve\nr01"


class TestDefaults:
    def setup_method(self):
        self.graph = Graph()
        self.registry = UndefinedGroupRegistry()
        self.diags = _diags()

    def test_declared_kinds(self):
        kinds = DeclaredKinds.of(["aws_vpc", "aws_instance"])
        assert kinds.has_vpc
        assert not kinds.has_subnet
        assert not kinds.has_security_group

    def test_nothing_declared(self):
        create_default_nodes(DeclaredKinds(False, False, False), self.graph, self.registry, self.diags)
        assert self.graph.clusters["cluster_aws_vpc-default"].parent == "G"
        assert self.graph.clusters["cluster_aws_subnet-default"].parent == "cluster_aws_vpc-default"
        assert self.graph.nodes["aws_vpc-default"].parent == "cluster_aws_vpc-default"
        assert self.graph.nodes["aws_subnet-default"].parent == "cluster_aws_subnet-default"
        assert self.graph.nodes["sg-default"].parent == "G"
        assert "sg-default" in self.registry

    def test_vpc_declared_default_subnet_at_root(self):
        create_default_nodes(DeclaredKinds(True, False, True), self.graph, self.registry, self.diags)
        assert not self.graph.has_cluster("cluster_aws_vpc-default")
        assert self.graph.clusters["cluster_aws_subnet-default"].parent == "G"
        assert not self.graph.has_node("sg-default")
        assert "sg-default" not in self.registry

    def test_everything_declared(self):
        create_default_nodes(DeclaredKinds(True, True, True), self.graph, self.registry, self.diags)
        assert self.graph.clusters == {}
        assert self.graph.nodes == {}

    def test_ensure_is_idempotent(self):
        assert ensure_default_vpc(self.graph, self.diags) == "cluster_aws_vpc-default"
        assert ensure_default_vpc(self.graph, self.diags) == "cluster_aws_vpc-default"
        ensure_default_subnet(self.graph, self.diags)
        ensure_default_subnet(self.graph, self.diags)
        ensure_default_security_group(self.graph, self.registry, self.diags)
        ensure_default_security_group(self.graph, self.registry, self.diags)
        assert len(self.graph.clusters) == 2
        assert self.graph.clusters["cluster_aws_subnet-default"].parent == "cluster_aws_vpc-default"
        assert "sg-default" in self.registry

    def test_ensure_subnet_without_default_vpc(self):
        ensure_default_subnet(self.graph, self.diags)
        assert self.graph.clusters["cluster_aws_subnet-default"].parent == "G"


class TestPlacement:
    def test_internet_node_always_present(self):
        graph, _ = _build()
        assert graph.nodes["Internet"].parent == "G"
        assert graph.nodes["Internet"].attrs["shape"] == "octagon"

    def test_vpc_and_subnet_clusters(self):
        graph, _ = _build(_vpc("main"), _subnet("a", "10.0.1.0/24"))
        vpc = graph.clusters["cluster_aws_vpc_main"]
        assert vpc.parent == "G"
        assert vpc.attrs["label"] == "VPC: main"
        assert graph.clusters["cluster_aws_subnet_a"].parent == "cluster_aws_vpc_main"
        assert graph.nodes["aws_vpc_main"].attrs == {"shape": "point", "style": "invis"}
        assert graph.nodes["aws_subnet_a"].parent == "cluster_aws_subnet_a"

    def test_instance_in_its_subnet(self):
        graph, _ = _build(_vpc("main"), _subnet("a", "10.0.1.0/24"), _instance("web", subnet="a"))
        assert graph.nodes["aws_instance_web"].parent == "cluster_aws_subnet_a"

    def test_instance_without_subnet_goes_to_default_subnet(self):
        graph, _ = _build(_vpc("main"), _subnet("a", "10.0.1.0/24"), _instance("web"))
        assert graph.nodes["aws_instance_web"].parent == "cluster_aws_subnet-default"
        # a declared VPC exists, so the lazily created default subnet sits at root
        assert graph.clusters["cluster_aws_subnet-default"].parent == "G"
        assert not graph.has_cluster("cluster_aws_vpc-default")

    def test_instance_with_undeclared_subnet_warns(self):
        graph, synth = _build(
            _vpc("main"), _subnet("a", "10.0.1.0/24"),
            ("aws_instance", "web", {"ami": "a", "instance_type": "t", "subnet_id": "subnet-0abc"}),
        )
        assert graph.nodes["aws_instance_web"].parent == "cluster_aws_subnet-default"
        assert any("subnet-0abc" in d.message for d in synth.diags.warnings)

    def test_subnet_with_undeclared_vpc_lands_in_default_vpc(self):
        graph, synth = _build(
            ("aws_subnet", "a", {"cidr_block": "10.0.1.0/24", "vpc_id": "vpc-123"}),
            _instance("web", subnet="a"),
        )
        assert graph.clusters["cluster_aws_subnet_a"].parent == "cluster_aws_vpc-default"
        assert graph.nodes["aws_instance_web"].parent == "cluster_aws_subnet_a"
        assert not graph.has_cluster("cluster_aws_subnet-default")
        assert any(d.subject == "aws_subnet.a" for d in synth.diags.warnings)

    def test_subnet_named_default_is_not_the_placeholder(self):
        graph, _ = _build(_vpc("main"), _subnet("default", "10.0.1.0/24"), _instance("bare"))
        assert graph.clusters["cluster_aws_subnet_default"].parent == "cluster_aws_vpc_main"
        assert graph.nodes["aws_instance_bare"].parent == "cluster_aws_subnet-default"
        assert graph.clusters["cluster_aws_subnet-default"].parent == "G"

    def test_vpc_named_default_is_not_the_placeholder(self):
        graph, _ = _build(_vpc("default"), ("aws_db_instance", "db", {}))
        assert graph.clusters["cluster_aws_vpc_default"].parent == "G"
        assert graph.nodes["aws_db_instance_db"].parent == "cluster_aws_vpc-default"

    def test_no_network_has_single_default_vpc(self):
        graph, _ = _build(_instance("one"), _instance("two"))
        roots = [c for c in graph.clusters.values() if c.parent == "G"]
        assert [c.name for c in roots] == ["cluster_aws_vpc-default"]
        inner = graph.child_clusters("cluster_aws_vpc-default")
        assert [c.name for c in inner] == ["cluster_aws_subnet-default"]

    def test_long_names_wrapped(self):
        graph, _ = _build(_instance("webserver01"))
        assert graph.nodes["aws_instance_webserver01"].attrs["label"] == "webserve\nr01"
        assert graph.nodes["aws_instance_webserver01"].attrs["shape"] == "box"

    def test_icons_dir(self):
        graph, _ = _build(_instance("web"), config=Config(icons_dir="/icons"))
        attrs = graph.nodes["aws_instance_web"].attrs
        assert attrs["image"].endswith("ec2.png")
        assert attrs["shape"] == "none"
        assert graph.nodes["Internet"].attrs["image"].endswith("internet.png")


class TestDatabasePlacement:
    def test_db_without_subnet_group_in_default_vpc(self):
        graph, _ = _build(_vpc("main"), ("aws_db_instance", "db", {}))
        assert graph.nodes["aws_db_instance_db"].parent == "cluster_aws_vpc-default"
        assert graph.clusters["cluster_aws_vpc-default"].parent == "G"

    def test_db_follows_first_subnet_of_group(self):
        graph, _ = _build(
            _vpc("main"), _vpc("other", "10.1.0.0/16"),
            _subnet("a", "10.0.1.0/24"), _subnet("b", "10.1.1.0/24", vpc="other"),
            ("aws_db_subnet_group", "grp", {"subnet_ids": ["${aws_subnet.b.id}", "${aws_subnet.a.id}"]}),
            ("aws_db_instance", "db", {"db_subnet_group_name": "${aws_db_subnet_group.grp.id}"}),
        )
        assert graph.nodes["aws_db_instance_db"].parent == "cluster_aws_vpc_other"

    def test_db_subnet_group_referenced_by_name(self):
        graph, synth = _build(
            _vpc("main"), _subnet("a", "10.0.1.0/24"),
            ("aws_db_subnet_group", "grp", {"subnet_ids": ["${aws_subnet.a.id}"]}),
            ("aws_db_instance", "db", {"db_subnet_group_name": "${aws_db_subnet_group.grp.name}"}),
        )
        assert graph.nodes["aws_db_instance_db"].parent == "cluster_aws_vpc_main"
        assert synth.diags.warnings == []

    def test_db_with_unknown_group_falls_back(self):
        graph, synth = _build(
            _vpc("main"),
            ("aws_db_instance", "db", {"db_subnet_group_name": "legacy-group"}),
        )
        assert graph.nodes["aws_db_instance_db"].parent == "cluster_aws_vpc-default"
        assert any(d.subject == "aws_db_instance.db" for d in synth.diags.warnings)

    def test_public_db_font_color(self):
        graph, _ = _build(
            ("aws_db_instance", "pub", {"publicly_accessible": True}),
            ("aws_db_instance", "priv", {}),
        )
        assert graph.nodes["aws_db_instance_pub"].attrs["fontcolor"] == "red"
        assert graph.nodes["aws_db_instance_priv"].attrs["fontcolor"] == "black"
        assert graph.nodes["aws_db_instance_pub"].attrs["shape"] == "cylinder"


class TestMultiSubnetPlacement:
    def setup_method(self):
        self.graph, _ = _build(
            _vpc("main"), _subnet("a", "10.0.1.0/24"), _subnet("b", "10.0.2.0/24"),
            ("aws_autoscaling_group", "workers", {
                "max_size": 2, "min_size": 1,
                "vpc_zone_identifier": ["${aws_subnet.a.id}", "${aws_subnet.b.id}"],
            }),
            ("aws_lb", "front", {
                "load_balancer_type": "application",
                "subnets": ["${aws_subnet.b.id}", "${aws_subnet.a.id}"],
            }),
        )

    def test_asg_in_first_subnet_only(self):
        assert self.graph.nodes["aws_autoscaling_group_workers"].parent == "cluster_aws_subnet_a"
        assert all("aws_autoscaling_group_workers" not in (e.src, e.dst) for e in self.graph.edges)

    def test_lb_in_first_subnet(self):
        assert self.graph.nodes["aws_lb_front"].parent == "cluster_aws_subnet_b"
        assert self.graph.nodes["aws_lb_front"].attrs["shape"] == "hexagon"

    def test_asg_without_subnets_in_default_subnet(self):
        graph, _ = _build(("aws_autoscaling_group", "w", {"max_size": 1, "min_size": 1}))
        assert graph.nodes["aws_autoscaling_group_w"].parent == "cluster_aws_subnet-default"
