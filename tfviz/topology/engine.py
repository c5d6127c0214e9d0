"""
Topology synthesis: module in, graph out.

Synthesis runs in two phases. ``decode_all`` decodes every resource and
records security group membership; ``build`` then draws the graph. Links are
only resolved once decoding is complete, so a rule referencing a group sees
every member of that group wherever it is declared in the module.
"""
import os
from typing import Optional

from tfviz.config import Config
from tfviz.diagnostics import Diagnostics
from tfviz.models.graph import Graph, GraphError
from tfviz.models.module import Module
from tfviz.topology import names
from tfviz.topology.context import Context, build_context
from tfviz.topology.defaults import DeclaredKinds, create_default_nodes
from tfviz.topology.links import SecurityGroupLinker
from tfviz.topology.nodes import NodeMaterializer
from tfviz.topology.store import ResourceStore, UndefinedGroupRegistry, decode_resources


def initiate_graph(config: Config, diags: Diagnostics) -> Graph:
    """Empty directed graph holding only the Internet node."""
    graph = Graph(names.ROOT, directed=True)
    attrs = {"label": names.INTERNET}
    if config.icons_dir:
        attrs.update({
            "shape": "none",
            "labelloc": "b",
            "image": os.path.join(config.icons_dir, "internet.png"),
        })
    else:
        attrs["shape"] = "octagon"
    diags.verbose(f"AddNode: {names.INTERNET} to {names.ROOT}")
    graph.add_node(names.ROOT, names.INTERNET, attrs)
    return graph


class Synthesizer:
    def __init__(self, module: Module, config: Optional[Config] = None, diags: Optional[Diagnostics] = None):
        self.module = module
        self.config = config or Config()
        self.diags = diags or Diagnostics(
            verbose=self.config.verbose,
            ignore_warnings=self.config.ignore_warnings,
        )
        self.context: Optional[Context] = None
        self.store: Optional[ResourceStore] = None
        self.registry = UndefinedGroupRegistry()
        self.graph: Optional[Graph] = None

    def decode_all(self) -> ResourceStore:
        """Phase one: symbol table, then every resource record."""
        self.context = build_context(self.module)
        self.store = decode_resources(self.module, self.context, self.diags)
        return self.store

    def _step(self, label: str, fn, *args) -> None:
        try:
            fn(*args)
        except GraphError as exc:
            self.diags.error(f"{label}: {exc}")

    def build(self) -> Graph:
        """Phase two: defaults, nodes, then security group edges."""
        if self.store is None:
            raise RuntimeError("decode_all() must run before build()")

        self.graph = initiate_graph(self.config, self.diags)
        kinds = DeclaredKinds.of(r.resource_type for r in self.module.managed_resources)

        self._step("default nodes", create_default_nodes, kinds, self.graph, self.registry, self.diags)
        self._step("graph nodes", NodeMaterializer(self.graph, self.store, self.config, self.diags).materialize)
        linker = SecurityGroupLinker(self.graph, self.store, self.registry, self.config, self.diags)
        self._step("graph edges", linker.resolve_links)
        return self.graph

    def report_unsupported(self) -> None:
        if self.store is not None:
            self.diags.warning_list("Unsupported resources:", self.store.unsupported)


def run(module: Module, config: Optional[Config] = None, diags: Optional[Diagnostics] = None) -> Graph:
    synth = Synthesizer(module, config, diags)
    synth.decode_all()
    graph = synth.build()
    synth.report_unsupported()
    return graph
