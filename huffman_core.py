# filename: huffman_core.py

import heapq
import logging
from collections import Counter

from huffman_errors import EmptyInputError

logger = logging.getLogger(__name__)


class HuffmanNode:
    __slots__ = ("index", "byte", "freq", "left", "right")

    def __init__(self, index, byte, freq, left=None, right=None):
        # left/right are arena indices, not node objects
        self.index = index
        self.byte = byte
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.byte is not None

    def __lt__(self, other):
        # Ties go to the node created first: leaves in byte order, then merges.
        return (self.freq, self.index) < (other.freq, other.index)

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(#{self.index}, byte={self.byte}, freq={self.freq})"
        return f"HuffmanNode(#{self.index}, freq={self.freq}, left={self.left}, right={self.right})"


class HuffmanTree:
    """
    Arena of HuffmanNode objects. Children are referenced by their index in
    ``nodes``, so the tree owns every node exactly once and can be compared
    structurally without walking object graphs.
    """

    def __init__(self):
        self.nodes = []
        self.root = None

    def add_leaf(self, byte, freq):
        node = HuffmanNode(len(self.nodes), byte, freq)
        self.nodes.append(node)
        return node

    def merge(self, left, right):
        node = HuffmanNode(len(self.nodes), None, left.freq + right.freq, left.index, right.index)
        self.nodes.append(node)
        return node

    def __len__(self):
        return len(self.nodes)

    def __getitem__(self, index):
        return self.nodes[index]

    @property
    def root_node(self):
        return None if self.root is None else self.nodes[self.root]

    @property
    def total(self):
        """Number of symbols the tree encodes (the root frequency)."""
        return 0 if self.root is None else self.nodes[self.root].freq

    @property
    def is_degenerate(self):
        return self.root is not None and self.nodes[self.root].is_leaf

    def shape(self, index=None):
        """Nested tuple of the structure below ``index``: byte for a leaf, (left, right) otherwise."""
        if index is None:
            if self.root is None:
                return None
            index = self.root
        node = self.nodes[index]
        if node.is_leaf:
            return node.byte
        return (self.shape(node.left), self.shape(node.right))


class FrequencyCounter:
    """Accumulates byte counts over any number of chunks."""

    def __init__(self):
        self._counts = Counter()
        self.total = 0

    def update(self, chunk):
        self._counts.update(chunk)
        self.total += len(chunk)
        return self

    def table(self):
        # Ascending key order keeps header serialization deterministic.
        return dict(sorted(self._counts.items()))


def count_frequencies(data):
    return FrequencyCounter().update(data).table()


class HuffmanLogic:
    def build_tree(self, freqs, require_symbols=False):
        tree = HuffmanTree()
        # Leaves get arena indices in ascending byte order.
        priority_queue = [tree.add_leaf(byte, freq) for byte, freq in sorted(freqs.items())]
        if not priority_queue:
            if require_symbols:
                raise EmptyInputError("cannot build a Huffman tree from an empty frequency table")
            return tree
        heapq.heapify(priority_queue)

        # Iteratively merge the two lightest nodes until one root remains
        while len(priority_queue) > 1:
            left = heapq.heappop(priority_queue)
            right = heapq.heappop(priority_queue)
            heapq.heappush(priority_queue, tree.merge(left, right))

        tree.root = priority_queue[0].index
        logger.debug("built tree with %d leaves, %d nodes, total %d", len(freqs), len(tree), tree.total)
        return tree

    def generate_codes(self, tree):
        """
        Walk the tree depth-first, left before right, and return the
        byte -> bit-string table. A single-leaf tree maps its byte to "".
        """
        codes = {}
        if tree.root is None:
            return codes

        stack = [(tree.root, "")]
        while stack:
            index, current_code = stack.pop()
            node = tree[index]
            if node.is_leaf:
                codes[node.byte] = current_code
                continue
            # Right pushed first so the left subtree is visited first
            stack.append((node.right, current_code + "1"))
            stack.append((node.left, current_code + "0"))
        return codes

    def encoding_codes(self, tree):
        """Codes usable for packing: the lone symbol of a degenerate tree gets "0"."""
        codes = self.generate_codes(tree)
        if tree.is_degenerate:
            codes = {byte: "0" for byte in codes}
        return codes
