"""
Decode a resource body into its typed record.

Decoding never aborts: each argument that fails to evaluate or to convert
produces a diagnostic string and leaves the field at its default value.
"""
import dataclasses
import typing
from typing import Any, Dict, List, Tuple, Type, TypeVar

from tfviz.topology.context import Context, UnresolvedReference, evaluate

T = TypeVar("T")


class DecodeError(Exception):
    """A value that does not fit the declared field type."""


def _field_kind(tp: Any) -> Any:
    """Strip Optional[...] and return the underlying annotation."""
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _to_str(val: Any) -> str:
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, (str, int, float)):
        return str(val)
    raise DecodeError(f"string required, got {type(val).__name__}")


def _to_int(val: Any) -> int:
    if isinstance(val, bool):
        raise DecodeError("number required, got bool")
    if isinstance(val, int):
        return val
    if isinstance(val, float) and val.is_integer():
        return int(val)
    if isinstance(val, str):
        try:
            return int(val.strip())
        except ValueError:
            pass
    raise DecodeError(f"number required, got {val!r}")


def _to_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    if isinstance(val, str) and val.strip().lower() in ("true", "false"):
        return val.strip().lower() == "true"
    raise DecodeError(f"bool required, got {val!r}")


def _to_str_list(val: Any) -> List[str]:
    if not isinstance(val, list):
        raise DecodeError(f"list of string required, got {type(val).__name__}")
    return [_to_str(v) for v in val]


def _convert(tp: Any, val: Any) -> Any:
    kind = _field_kind(tp)
    if kind is str:
        return _to_str(val)
    if kind is int:
        return _to_int(val)
    if kind is bool:
        return _to_bool(val)
    if typing.get_origin(kind) in (list, List):
        return _to_str_list(val)
    raise DecodeError(f"unsupported field type {kind!r}")


def _block_bodies(raw: Any) -> List[Dict[str, Any]]:
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, list):
        return [b for b in raw if isinstance(b, dict)]
    return []


def decode_body(record_type: Type[T], body: Dict[str, Any], ctx: Context) -> Tuple[T, List[str]]:
    """
    Decode ``body`` into ``record_type``. Returns the record and the list of
    diagnostic messages raised along the way.
    """
    problems: List[str] = []
    values: Dict[str, Any] = {}
    hints = typing.get_type_hints(record_type)

    for f in dataclasses.fields(record_type):
        hcl_name = f.metadata.get("hcl")
        if hcl_name is None:
            continue

        block_type = f.metadata.get("block")
        if block_type is not None:
            blocks = []
            for i, block_body in enumerate(_block_bodies(body.get(hcl_name))):
                block, block_problems = decode_body(block_type, block_body, ctx)
                blocks.append(block)
                problems.extend(f"{hcl_name}[{i}]: {p}" for p in block_problems)
            values[f.name] = blocks
            continue

        if hcl_name not in body or body[hcl_name] is None:
            if f.metadata.get("required"):
                problems.append(f'Missing required argument "{hcl_name}"')
            continue

        try:
            values[f.name] = _convert(hints[f.name], evaluate(body[hcl_name], ctx))
        except (UnresolvedReference, DecodeError) as exc:
            problems.append(f'Invalid value for "{hcl_name}": {exc}')

    return record_type(**values), problems
