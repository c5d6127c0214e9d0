"""
In-memory graph model handed to the exporters.

The model mirrors what Graphviz understands: a root graph, clusters nested
inside it or inside each other, nodes living in exactly one of those scopes,
and edges between existing nodes. Every mutation is validated so exporters
never see an edge whose endpoint is missing.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


class GraphError(Exception):
    """Raised when a mutation would leave the graph inconsistent."""


@dataclass
class Cluster:
    name: str
    parent: str
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass
class Node:
    name: str
    parent: str
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass
class Edge:
    src: str
    dst: str
    attrs: Dict[str, str] = field(default_factory=dict)


class Graph:
    def __init__(self, name: str = "G", directed: bool = True):
        self.name = name
        self.directed = directed
        self.attrs: Dict[str, str] = {}
        self.clusters: Dict[str, Cluster] = {}
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []

    def _check_scope(self, scope: str) -> None:
        if scope != self.name and scope not in self.clusters:
            raise GraphError(f"scope '{scope}' does not exist")

    def _check_free(self, name: str) -> None:
        if name == self.name or name in self.clusters or name in self.nodes:
            raise GraphError(f"'{name}' already exists in graph {self.name}")

    def add_cluster(self, parent: str, name: str, attrs: Optional[Dict[str, str]] = None) -> Cluster:
        self._check_scope(parent)
        self._check_free(name)
        cluster = Cluster(name=name, parent=parent, attrs=dict(attrs or {}))
        self.clusters[name] = cluster
        return cluster

    def add_node(self, parent: str, name: str, attrs: Optional[Dict[str, str]] = None) -> Node:
        self._check_scope(parent)
        self._check_free(name)
        node = Node(name=name, parent=parent, attrs=dict(attrs or {}))
        self.nodes[name] = node
        return node

    def add_edge(self, src: str, dst: str, attrs: Optional[Dict[str, str]] = None) -> Edge:
        for endpoint in (src, dst):
            if endpoint not in self.nodes:
                raise GraphError(f"edge endpoint '{endpoint}' is not a node")
        edge = Edge(src=src, dst=dst, attrs=dict(attrs or {}))
        self.edges.append(edge)
        return edge

    def has_node(self, name: str) -> bool:
        return name in self.nodes

    def has_cluster(self, name: str) -> bool:
        return name in self.clusters

    def child_clusters(self, scope: str) -> List[Cluster]:
        return [c for c in self.clusters.values() if c.parent == scope]

    def child_nodes(self, scope: str) -> List[Node]:
        return [n for n in self.nodes.values() if n.parent == scope]
