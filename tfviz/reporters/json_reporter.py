"""
JSON graph export.
"""
import json
from datetime import datetime, timezone

from tfviz import __version__
from tfviz.models.graph import Graph


def build_report(graph: Graph, source_path: str) -> str:
    report = {
        "meta": {
            "generated": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "source": source_path,
            "tool": "tfviz",
            "version": __version__,
        },
        "summary": {
            "clusters": len(graph.clusters),
            "nodes": len(graph.nodes),
            "edges": len(graph.edges),
        },
        "graph": {
            "name": graph.name,
            "directed": graph.directed,
            "attrs": graph.attrs,
        },
        "clusters": [
            {"name": c.name, "parent": c.parent, "attrs": c.attrs}
            for c in graph.clusters.values()
        ],
        "nodes": [
            {"name": n.name, "parent": n.parent, "attrs": n.attrs}
            for n in graph.nodes.values()
        ],
        "edges": [
            {"src": e.src, "dst": e.dst, "attrs": e.attrs}
            for e in graph.edges
        ],
    }
    return json.dumps(report, indent=2)
