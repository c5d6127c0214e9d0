"""
Graphviz DOT generator.
"""
from typing import Dict, Union

import graphviz

from tfviz.models.graph import Graph

Dot = Union[graphviz.Digraph, graphviz.Graph]


def dot_id(name: str) -> str:
    # graphviz reads "a:b" in an edge endpoint as node "a", port "b" (IPv6 CIDR nodes)
    return name.replace(":", "_")


def _attrs(attrs: Dict[str, str]) -> Dict[str, str]:
    """Attribute values with line breaks spelled the DOT way."""
    return {k: str(v).replace("\n", "\\n") for k, v in attrs.items()}


def _fill(dot: Dot, graph: Graph, scope: str) -> None:
    for cluster in graph.child_clusters(scope):
        with dot.subgraph(name=cluster.name) as sub:
            sub.attr(**_attrs(cluster.attrs))
            _fill(sub, graph, cluster.name)
    for node in graph.child_nodes(scope):
        dot.node(dot_id(node.name), **_attrs(node.attrs))


def build_graph(graph: Graph) -> Dot:
    """Walk the graph model into a graphviz Digraph (or Graph when undirected)."""
    dot_cls = graphviz.Digraph if graph.directed else graphviz.Graph
    dot = dot_cls(name=graph.name)
    if graph.attrs:
        dot.attr(**_attrs(graph.attrs))
    _fill(dot, graph, graph.name)
    for edge in graph.edges:
        dot.edge(dot_id(edge.src), dot_id(edge.dst), **_attrs(edge.attrs))
    return dot


def build_report(graph: Graph) -> str:
    return build_graph(graph).source
