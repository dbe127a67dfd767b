"""Hash algorithm assignments for ENS names and state digests."""

from __future__ import annotations

from dataclasses import dataclass

from blake3 import blake3
from eth_utils import keccak

from ..config import HASH_SIZE, ROOT_NODE


@dataclass(frozen=True)
class HashAssignment:
    purpose: str
    algorithm: str
    output_size: int
    input_spec: str


ASSIGNMENTS = [
    HashAssignment("label_hash", "KECCAK-256", 32, "utf-8 label bytes"),
    HashAssignment("namehash", "KECCAK-256", 32, "parent_node || label_hash, folded from the root"),
    HashAssignment("state_digest", "BLAKE3", 32, "canonical state encoding"),
]


def keccak256(data: bytes) -> bytes:
    return keccak(primitive=data)


def blake3_hash(data: bytes) -> bytes:
    return blake3(data).digest()


def label_hash(label: str) -> bytes:
    return keccak256(label.encode("utf-8"))


def subnode(parent: bytes, label: bytes) -> bytes:
    """Node of ``label`` under ``parent``, as the name registry derives it."""
    if len(parent) != HASH_SIZE or len(label) != HASH_SIZE:
        raise ValueError("parent and label must be 32 bytes")
    return keccak256(parent + label)


def namehash(name: str) -> bytes:
    """EIP-137 namehash. The empty name maps to the root node.

    Labels are folded right to left: ``namehash("alice.eth") ==
    subnode(subnode(ROOT, keccak("eth")), keccak("alice"))``. Names are
    taken as already normalized.
    """
    node = ROOT_NODE
    if not name:
        return node
    for label in reversed(name.split(".")):
        node = subnode(node, label_hash(label))
    return node
