"""A doubly linked list of typed string hashes and hash concatenation."""

from __future__ import annotations

from dataclasses import dataclass, field

_MAX_TYPE = 0xFF


def _check_type(node_type):
    if not 0 <= node_type <= _MAX_TYPE:
        raise ValueError(f"node type must be between 0 and {_MAX_TYPE}, got {node_type}")
    return node_type


@dataclass(eq=False)
class StringProcNode:
    """One list element: a small integer type and the hash string it refers to."""

    type: int
    hash: str
    next: StringProcNode | None = field(default=None, repr=False)
    previous: StringProcNode | None = field(default=None, repr=False)

    def __post_init__(self):
        _check_type(self.type)


class StringProcList:
    """A doubly linked list of :class:`StringProcNode` kept in insertion order."""

    def __init__(self):
        self.first: StringProcNode | None = None
        self.last: StringProcNode | None = None

    def add_node(self, node_type, hash_value):
        """Append a node with the given type and hash; return the new node."""
        node = StringProcNode(node_type, hash_value)
        if self.last is None:
            self.first = node
        else:
            node.previous = self.last
            self.last.next = node
        self.last = node
        return node

    def concat(self, node_type, hash_value):
        """Return ``hash_value`` followed by the hashes of every node of ``node_type``."""
        _check_type(node_type)
        return "".join([hash_value, *(node.hash for node in self if node.type == node_type)])

    def __iter__(self):
        node = self.first
        while node is not None:
            yield node
            node = node.next

    def __len__(self):
        return sum(1 for _ in self)

    def print_to(self, file):
        """Write the length of the list and then each node to ``file``."""
        file.write(f"List length: {len(self)}\n")
        for node in self:
            file.write(f"\tnode hash: {node.hash} | type: {node.type}\n")


def str_concat(first, second):
    """Return a new string made of ``first`` followed by ``second``."""
    return first + second