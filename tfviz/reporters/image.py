"""
Image export through the Graphviz ``dot`` executable.
"""
from subprocess import CalledProcessError

import graphviz

from tfviz.models.graph import Graph
from tfviz.reporters import dot

IMAGE_FORMATS = ("png", "svg", "pdf", "jpg")


class ExportError(Exception):
    pass


def render(graph: Graph, fmt: str) -> bytes:
    if fmt not in IMAGE_FORMATS:
        raise ExportError(f"unsupported image format '{fmt}'")
    try:
        return dot.build_graph(graph).pipe(format=fmt)
    except graphviz.ExecutableNotFound as exc:
        raise ExportError("Graphviz 'dot' executable not found on PATH") from exc
    except CalledProcessError as exc:
        raise ExportError(f"dot failed with exit code {exc.returncode}") from exc
