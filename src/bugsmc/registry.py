"""
Node Registration System

This module provides the arena that owns a model's nodes. Nodes are stored in
registration order and addressed by index; the model's derived views
(jumping stochastics, deterministics) are plain index lists into this arena.

Every registration returns a NodeHandle that carries an explicit ownership
tag:

    Ownership.OWNED    - the model allocated the value array (the caller passed
                         a Python scalar or sequence). Released with the model.
    Ownership.BORROWED - the caller passed a numpy array; the node reads and
                         writes that exact array in place and the model never
                         reallocates or clears it.

Example usage:
    registry = NodeRegistry()
    handle = registry.register(Stochastic('b', np.zeros(3), dnorm(0, 1e-3)), Ownership.BORROWED)
    registry.get('b') is handle        # lookup by name
    registry.get(handle.value) is handle   # lookup by the bound array
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

import numpy as np

from .error_handling import NodeNotFoundError
from .nodes import Node


class Ownership(Enum):
    """Who owns the storage a node is bound to."""
    OWNED = 'owned'
    BORROWED = 'borrowed'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class NodeHandle:
    """
    Reference to a registered node.

    Fields:
        index: Position in the model's arena (registration order)
        name: Node name, unique within the model
        ownership: OWNED or BORROWED storage
        node: The node itself
    """
    index: int
    name: str
    ownership: Ownership
    node: Node = field(repr=False, compare=False)

    @property
    def value(self) -> np.ndarray:
        """The bound storage (the very same array object the node mutates)."""
        return self.node.value

    @property
    def history(self) -> np.ndarray:
        return self.node.history

    @property
    def owned(self) -> bool:
        return self.ownership is Ownership.OWNED

    def assign(self, new_value) -> None:
        """Write new_value into the bound storage in place (for update callbacks)."""
        self.node.value[...] = new_value

    def mean(self):
        return self.node.mean()


class NodeRegistry:
    """Arena of nodes in registration order, with name and binding lookup."""

    def __init__(self):
        self._handles: List[NodeHandle] = []
        self._by_name = {}

    def register(self, node: Node, ownership: Ownership) -> NodeHandle:
        """
        Append a node to the arena.

        Raises:
            ValueError: If the name is taken or the node's storage is already bound
        """
        if node.name in self._by_name:
            raise ValueError(f"Node '{node.name}' is already registered")
        for existing in self._handles:
            if existing.node.value is node.value:
                raise ValueError(
                    f"Storage for '{node.name}' is already bound to node '{existing.name}'"
                )

        handle = NodeHandle(index=len(self._handles), name=node.name,
                            ownership=ownership, node=node)
        self._handles.append(handle)
        self._by_name[node.name] = handle
        return handle

    def get(self, binding) -> NodeHandle:
        """
        Look up a registered node by name, bound array, node or handle.

        Raises:
            NodeNotFoundError: If nothing was registered under the binding
        """
        if isinstance(binding, str):
            if binding in self._by_name:
                return self._by_name[binding]
        elif isinstance(binding, NodeHandle):
            if binding.index < len(self._handles) and self._handles[binding.index] is binding:
                return binding
        else:
            for handle in self._handles:
                if handle.node is binding or handle.node.value is binding:
                    return handle

        available = list(self._by_name.keys())
        label = binding if isinstance(binding, str) else type(binding).__name__
        raise NodeNotFoundError(f"Unknown node binding '{label}'. Registered: {available}")

    def indices(self, predicate: Callable[[Node], bool]) -> List[int]:
        """Arena indices of nodes matching predicate, in registration order."""
        return [h.index for h in self._handles if predicate(h.node)]

    def node_at(self, index: int) -> Node:
        return self._handles[index].node

    @property
    def handles(self) -> List[NodeHandle]:
        return list(self._handles)

    @property
    def nodes(self) -> List[Node]:
        return [h.node for h in self._handles]

    def __len__(self):
        return len(self._handles)

    def __contains__(self, binding):
        try:
            self.get(binding)
        except NodeNotFoundError:
            return False
        return True

    def clear(self) -> None:
        """
        Release every node. Owned storage is dropped with its node; borrowed
        arrays are detached untouched.
        """
        for handle in self._handles:
            if handle.ownership is Ownership.OWNED:
                handle.node.release()
        self._handles.clear()
        self._by_name.clear()
