from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Variable:
    name: str
    default: Any = None
    has_default: bool = False


@dataclass
class ManagedResource:
    resource_type: str     # e.g. "aws_vpc"
    name: str              # logical name in the module
    body: Dict[str, Any] = field(default_factory=dict)
    source_file: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.resource_type}.{self.name}"


@dataclass
class Module:
    source_dir: str
    files: List[str] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    managed_resources: List[ManagedResource] = field(default_factory=list)
    # values read from terraform.tfvars / *.auto.tfvars, applied over defaults
    variable_values: Dict[str, Any] = field(default_factory=dict)
