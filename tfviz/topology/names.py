"""
Graph identifiers for resources, clusters and their anchors.
"""
from typing import List

ROOT = "G"
INTERNET = "Internet"
DEFAULT_SECURITY_GROUP = "sg-default"
# Terraform names cannot start with "-", so these never collide with a
# declared "default" VPC or subnet
DEFAULT_VPC = "aws_vpc-default"
DEFAULT_SUBNET = "aws_subnet-default"

LABEL_WIDTH = 8


def node_id(ref: str) -> str:
    """'aws_instance.web' -> 'aws_instance_web'"""
    return ref.replace(".", "_")


def cluster_id(anchor: str) -> str:
    return "cluster_" + anchor


def vpc_anchor(name: str) -> str:
    return "aws_vpc_" + name


def subnet_anchor(name: str) -> str:
    return "aws_subnet_" + name


def ref_name(ref: str) -> str:
    """'aws_subnet.private' -> 'private'; bare identifiers come back unchanged."""
    return ref.split(".", 1)[1] if "." in ref else ref


def chunk(text: str, width: int = LABEL_WIDTH) -> List[str]:
    return [text[i:i + width] for i in range(0, len(text), width)] or [text]


def wrap_label(name: str, width: int = LABEL_WIDTH) -> str:
    """Split long resource names over several lines."""
    return "\n".join(chunk(name, width))
