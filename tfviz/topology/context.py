"""
Interpolation context: the symbol table used while decoding resources.

Every supported resource is reachable as ``<type>.<name>.id`` (or ``.name``,
the usual way to point at a DB subnet group) and evaluates to the string
``"<type>.<name>"``; that string is what the rest of tfviz uses to identify
a resource. Variables are reachable as ``var.<name>``.
"""
import re
from typing import Any, Dict

from tfviz.models.module import Module

# Types that can be referenced from other resources
REFERENCEABLE_TYPES = (
    "aws_vpc",
    "aws_subnet",
    "aws_instance",
    "aws_security_group",
    "aws_db_instance",
    "aws_db_subnet_group",
    "aws_lb",
    "aws_alb",
    "aws_autoscaling_group",
)

# attributes of a resource that evaluate to its "<type>.<name>" identifier
RESOURCE_ATTRS = ("id", "name")

_INTERP_RE = re.compile(r"\$\{([^{}]*)\}")
_TRAVERSAL_RE = re.compile(r"^[A-Za-z_][\w-]*(\.[A-Za-z_][\w-]*)+$")

Context = Dict[str, Dict[str, Any]]


class UnresolvedReference(Exception):
    """An interpolation that cannot be evaluated against the context."""


def build_context(module: Module) -> Context:
    ctx: Context = {"var": {}}

    for v in module.variables:
        # a variable without default stays traceable in the output
        ctx["var"][v.name] = v.default if v.has_default else f"var_{v.name}"
    for name, value in module.variable_values.items():
        ctx["var"][name] = value

    for t in REFERENCEABLE_TYPES:
        ctx[t] = {}
    for r in module.managed_resources:
        if r.resource_type in REFERENCEABLE_TYPES:
            ctx[r.resource_type][r.name] = {attr: r.qualified_name for attr in RESOURCE_ATTRS}
    return ctx


def _lookup(expr: str, ctx: Context) -> Any:
    expr = expr.strip()
    if not _TRAVERSAL_RE.match(expr):
        raise UnresolvedReference(f"unsupported expression '{expr}'")

    parts = expr.split(".")
    cur: Any = ctx
    for i, part in enumerate(parts):
        if not isinstance(cur, dict) or part not in cur:
            where = ".".join(parts[:i]) or "context"
            raise UnresolvedReference(f"'{expr}': '{part}' is not defined in {where}")
        cur = cur[part]
    if len(parts) == 2 and parts[0] in REFERENCEABLE_TYPES:
        raise UnresolvedReference(f"'{expr}' is a resource, not a value (missing .id?)")
    return cur


def evaluate(value: Any, ctx: Context) -> Any:
    """
    Resolve ``${...}`` interpolations inside ``value``.

    A string that is exactly one interpolation evaluates to the referenced
    value with its own type; interpolations embedded in a longer string are
    substituted as text. Lists and dicts are evaluated element-wise.
    """
    if isinstance(value, list):
        return [evaluate(v, ctx) for v in value]
    if isinstance(value, dict):
        return {k: evaluate(v, ctx) for k, v in value.items()}
    if not isinstance(value, str) or "${" not in value:
        return value

    whole = _INTERP_RE.fullmatch(value)
    if whole:
        return _lookup(whole.group(1), ctx)

    def _sub(m: "re.Match") -> str:
        resolved = _lookup(m.group(1), ctx)
        if isinstance(resolved, (list, dict)):
            raise UnresolvedReference(f"'{m.group(1)}' cannot be embedded in a string")
        if isinstance(resolved, bool):
            return "true" if resolved else "false"
        return str(resolved)

    return _INTERP_RE.sub(_sub, value)
