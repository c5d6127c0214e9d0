import glob
import os
from typing import Any, Dict, List

import hcl2

from tfviz.diagnostics import Diagnostics
from tfviz.models.module import ManagedResource, Module, Variable


class TerraformLoadError(Exception):
    """The path does not hold a usable Terraform configuration."""


def _strip_quotes(val: str) -> str:
    # newer python-hcl2 releases keep the literal quotes around strings
    if len(val) >= 2 and val[0] == '"' and val[-1] == '"':
        return val[1:-1]
    return val


def _normalize(val: Any) -> Any:
    """
    Bring python-hcl2 output to plain Python values: drop line metadata,
    strip string quoting, keep lists (nested blocks stay lists of dicts).
    """
    if isinstance(val, dict):
        return {
            _strip_quotes(str(k)): _normalize(v)
            for k, v in val.items()
            if not str(k).startswith("__")
        }
    if isinstance(val, list):
        return [_normalize(v) for v in val]
    if isinstance(val, str):
        return _strip_quotes(val)
    return val


def _block_items(section: Any):
    """
    Yield (label, body) pairs of a top-level block section.

    python-hcl2 wraps each block in a list; depending on the version, a
    section is either a list of single-key dicts or a dict.
    """
    if isinstance(section, dict):
        section = [section]
    if not isinstance(section, list):
        return
    for item in section:
        if not isinstance(item, dict):
            continue
        for label, body in item.items():
            yield label, body


def _load_hcl(filepath: str) -> Dict[str, Any]:
    try:
        with open(filepath, encoding="utf-8") as fh:
            data = hcl2.load(fh)
    except Exception as exc:
        raise TerraformLoadError(f"failed to parse {filepath}: {exc}") from exc
    return _normalize(data)


def _variables(data: Dict[str, Any]) -> List[Variable]:
    variables = []
    for name, body in _block_items(data.get("variable", [])):
        body = body if isinstance(body, dict) else {}
        default = body.get("default")
        variables.append(Variable(name=name, default=default, has_default=default is not None))
    return variables


def _resources(data: Dict[str, Any], filepath: str) -> List[ManagedResource]:
    resources = []
    for resource_type, instances in _block_items(data.get("resource", [])):
        for name, body in _block_items(instances):
            if isinstance(body, list):
                # single-element block list in older python-hcl2 releases
                body = body[0] if body and isinstance(body[0], dict) else {}
            if not isinstance(body, dict):
                body = {}
            resources.append(ManagedResource(
                resource_type=resource_type,
                name=name,
                body=body,
                source_file=filepath,
            ))
    return resources


def load_values_file(filepath: str) -> Dict[str, Any]:
    """Read a .tfvars file into a name -> value mapping."""
    return _load_hcl(filepath)


def _variable_values(source_dir: str, diags: Diagnostics) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    candidates = [os.path.join(source_dir, "terraform.tfvars")]
    candidates += sorted(glob.glob(os.path.join(source_dir, "*.auto.tfvars")))
    for path in candidates:
        if not os.path.isfile(path):
            continue
        try:
            values.update(load_values_file(path))
        except TerraformLoadError as exc:
            diags.warning(str(exc))
        else:
            diags.verbose(f"Loaded variable values from {path}")
    return values


def parse_file(filepath: str) -> Module:
    """Parse a single .tf file into a module of its own."""
    data = _load_hcl(filepath)
    return Module(
        source_dir=os.path.dirname(os.path.abspath(filepath)),
        files=[filepath],
        variables=_variables(data),
        managed_resources=_resources(data, filepath),
    )


def parse_directory(path: str, diags: Diagnostics) -> Module:
    """Parse every .tf file of a directory (not its subdirectories)."""
    files = sorted(glob.glob(os.path.join(path, "*.tf")))
    if not files:
        raise TerraformLoadError(
            f"Directory {path} does not contain valid Terraform configuration files"
        )

    module = Module(source_dir=os.path.abspath(path))
    for fpath in files:
        try:
            part = parse_file(fpath)
        except TerraformLoadError as exc:
            diags.warning(str(exc))
            continue
        module.files.append(fpath)
        module.variables.extend(part.variables)
        module.managed_resources.extend(part.managed_resources)
    return module


def load_module(path: str, diags: Diagnostics) -> Module:
    """
    Load a Terraform file or directory. Raises TerraformLoadError when
    nothing usable can be read.
    """
    if not os.path.exists(path):
        raise TerraformLoadError(f"{path} does not exist")

    if os.path.isdir(path):
        diags.verbose(f"Parsing {path} Terraform module...")
        module = parse_directory(path, diags)
    else:
        diags.verbose(f"Parsing {path} Terraform file...")
        module = parse_file(path)
        if not module.managed_resources:
            raise TerraformLoadError(
                f"File {path} does not contain valid Terraform configuration"
            )

    module.variable_values = _variable_values(module.source_dir, diags)
    return module
