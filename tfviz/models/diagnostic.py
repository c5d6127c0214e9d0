from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    ERROR   = "ERROR"
    WARNING = "WARNING"
    VERBOSE = "VERBOSE"


@dataclass
class Diagnostic:
    severity: Severity
    message: str
    subject: str = ""      # e.g. "aws_subnet.private", empty for run-level messages

    def __str__(self) -> str:
        if self.subject:
            return f"[{self.severity.value}] {self.subject}: {self.message}"
        return f"[{self.severity.value}] {self.message}"
