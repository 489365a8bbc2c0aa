# filename: huffman_core.py

import heapq
import itertools
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Union

from huffman_errors import EmptyInputError, MalformedPayloadError

logger = logging.getLogger(__name__)

Symbol = Hashable
FrequencyTable = Dict[Symbol, int]
CodeTable = Dict[Symbol, str]

# Leaf symbols that survive a JSON round trip unchanged
SERIALIZABLE_SYMBOL_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Leaf:
    symbol: Symbol
    weight: int = 1


@dataclass(frozen=True)
class Branch:
    """Internal node. ``zero`` and ``one`` are the children reached by bits 0 and 1.

    Trees from :func:`build` always fill both children; hand-built trees may
    leave ``one`` empty.
    """
    zero: "Node"
    one: Optional["Node"] = None
    weight: int = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "weight", sum(child.weight for child in self.children()))

    def children(self):
        return [child for child in (self.zero, self.one) if child is not None]

    def child(self, bit: str) -> Optional["Node"]:
        return self.zero if bit == "0" else self.one


Node = Union[Leaf, Branch]


def count(symbols: Iterable[Symbol]) -> FrequencyTable:
    # Keys keep first-occurrence order, which build() relies on for ties
    return Counter(symbols)


def build(table: FrequencyTable) -> Node:
    """Merge the two lightest nodes until a single root is left.

    Heap entries are ``(weight, sequence, node)``. Leaves are numbered in
    table order and each merged branch takes the next number, so equal
    weights pop in insertion order. The first node popped becomes child 0.
    A table with one symbol yields a lone :class:`Leaf`.
    """
    if not table:
        raise EmptyInputError("cannot build a Huffman tree without symbols")

    sequence = itertools.count()
    priority_queue = []
    for symbol, weight in table.items():
        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise ValueError(f"frequency of {symbol!r} must be a positive integer, got {weight!r}")
        priority_queue.append((weight, next(sequence), Leaf(symbol, weight)))
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        heapq.heappush(priority_queue, (left_weight + right_weight, next(sequence), Branch(left, right)))

    logger.debug("built Huffman tree from %d symbols", len(table))
    return priority_queue[0][2]


def invert(root: Node) -> CodeTable:
    """Map every leaf symbol to the bit path leading to it."""
    if isinstance(root, Leaf):
        # A lone symbol still needs one bit per occurrence
        return {root.symbol: "0"}

    codes: CodeTable = {}
    stack = [(root, "")]
    while stack:
        node, path = stack.pop()
        if isinstance(node, Leaf):
            codes[node.symbol] = path
            continue
        if node.one is not None:
            stack.append((node.one, path + "1"))
        stack.append((node.zero, path + "0"))
    return codes


def _preorder(node: Node):
    stack = [node]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, Branch):
            if node.one is not None:
                stack.append(node.one)
            stack.append(node.zero)


def leaves(node: Optional[Node]) -> List[Symbol]:
    if node is None:
        return []
    return [n.symbol for n in _preorder(node) if isinstance(n, Leaf)]


def flatten(root: Node) -> List[List[Symbol]]:
    """Group leaf symbols by the depth-1 subtree they hang under.

    Debug view only: deeper structure below the first level is lost.
    """
    if isinstance(root, Leaf):
        return [[root.symbol]]
    return [leaves(child) for child in root.children()]


def dump_tree(root: Node) -> str:
    """Serialize a tree as a flat, preorder JSON array.

    A leaf is a one-element array ``[symbol]``; a branch is its child count,
    ``2``, or ``1`` when only the 0 child is present. ``[2,["a"],["b"]]``
    is a branch over leaves ``a`` and ``b``.
    """
    tokens = []
    for node in _preorder(root):
        if isinstance(node, Branch):
            tokens.append(2 if node.one is not None else 1)
        elif isinstance(node.symbol, SERIALIZABLE_SYMBOL_TYPES):
            tokens.append([node.symbol])
        else:
            raise TypeError(f"cannot serialize leaf symbol {node.symbol!r} of type {type(node.symbol).__name__}")
    return json.dumps(tokens, separators=(",", ":"), ensure_ascii=False)


def load_tree(text: str) -> Node:
    try:
        tokens = json.loads(text)
    except ValueError as e:
        raise MalformedPayloadError(f"tree description is not valid JSON: {e}") from e
    if not isinstance(tokens, list) or not tokens:
        raise MalformedPayloadError("tree description must be a non-empty array")

    # Each open entry is [arity, children collected so far]
    pending = []
    root = None
    for position, token in enumerate(tokens):
        if root is not None:
            raise MalformedPayloadError(f"unexpected entry after the tree at position {position}")
        if type(token) is int and token in (1, 2):
            pending.append([token, []])
            continue
        if not isinstance(token, list) or len(token) != 1 or isinstance(token[0], (list, dict)):
            raise MalformedPayloadError(f"invalid tree entry {token!r} at position {position}")

        node = Leaf(token[0])
        while True:
            if not pending:
                root = node
                break
            arity, children = pending[-1]
            children.append(node)
            if len(children) < arity:
                break
            pending.pop()
            node = Branch(*children)

    if root is None:
        raise MalformedPayloadError("tree description ends before the tree is complete")
    return root


class HuffmanLogic:
    """Tree stage of the coder: frequency analysis, tree and code table."""

    def build_tree(self, data):
        return build(count(data))

    def generate_codes(self, tree):
        return invert(tree)
