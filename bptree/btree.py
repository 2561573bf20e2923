from __future__ import annotations

"""
Contains the implementation of the b+ tree
"""
import abc
import logging
import weakref

from bisect import bisect_left, bisect_right
from collections import deque
from enum import Enum, auto
from typing import Any, Iterator, List, Optional, Tuple

from .constants import DEFAULT_BRANCHING_FACTOR, MIN_BRANCHING_FACTOR


logger = logging.getLogger(__name__)

# returned by node lookups when a key is absent;
# distinct from None, since None is a valid value
NOT_FOUND = object()


class InvalidConfigurationError(ValueError):
    """
    Tree was constructed with an unusable branching factor
    """
    pass


class TreeValidationError(Exception):
    """
    Some structural invariant of the tree does not hold
    """
    pass


class RangePolicy(Enum):
    Inclusive = auto()
    Exclusive = auto()

    def admits_lower(self, key, bound) -> bool:
        if self is RangePolicy.Inclusive:
            return key >= bound
        return key > bound

    def admits_upper(self, key, bound) -> bool:
        if self is RangePolicy.Inclusive:
            return key <= bound
        return key < bound


class NodeType(Enum):
    NodeInternal = 1
    NodeLeaf = 2


# section: nodes


class Node(abc.ABC):
    """
    Contract shared by leaf and internal nodes.

    Nodes never refer to the tree that holds them. A mutation returns to the
    caller, which then checks `is_overflow`/`is_underflow` on the mutated node
    and restructures it; only the caller holding the root can reseat it.
    """

    node_type: NodeType = None

    def __init__(self, branching_factor: int):
        self.branching_factor = branching_factor
        self.keys: List[Any] = []

    def num_keys(self) -> int:
        return len(self.keys)

    @abc.abstractmethod
    def first_leaf_key(self):
        """
        smallest key stored in the subtree rooted at self.
        This is computed on each call, since splits and merges
        change the leftmost spine.
        """

    @abc.abstractmethod
    def find_leaf(self, key) -> LeafNode:
        """leaf whose key range covers `key`"""

    @abc.abstractmethod
    def get_value(self, key):
        """value for key or NOT_FOUND"""

    @abc.abstractmethod
    def get_range(self, key_low, low_policy: RangePolicy, key_high, high_policy: RangePolicy) -> list:
        pass

    @abc.abstractmethod
    def insert_value(self, key, value) -> bool:
        """
        insert or update; returns True if `key` was not present before
        """

    @abc.abstractmethod
    def delete_value(self, key) -> bool:
        """
        remove `key`; returns True if key was present
        """

    @abc.abstractmethod
    def split(self) -> Node:
        """
        move the upper half of self to a new right sibling and return the sibling
        """

    @abc.abstractmethod
    def merge(self, sibling: Node):
        """
        absorb the contents of the right sibling `sibling`
        """

    @abc.abstractmethod
    def is_overflow(self) -> bool:
        pass

    @abc.abstractmethod
    def is_underflow(self) -> bool:
        pass

    def __str__(self):
        return str(self.keys)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.keys})"


class LeafNode(Node):
    """
    Holds sorted keys and their values. Leaves are chained in key order
    through `next`; the link is a weak reference, since leaves are owned
    by their parent and not by their predecessor.
    """

    node_type = NodeType.NodeLeaf

    def __init__(self, branching_factor: int):
        super().__init__(branching_factor)
        self.values: List[Any] = []
        self._next_ref: Optional[weakref.ref] = None

    @property
    def next(self) -> Optional[LeafNode]:
        if self._next_ref is None:
            return None
        return self._next_ref()

    @next.setter
    def next(self, leaf: Optional[LeafNode]):
        self._next_ref = weakref.ref(leaf) if leaf is not None else None

    def find(self, key) -> Tuple[int, bool]:
        """
        binary search for `key`
        :return: (index, found); index is the insert location if not found
        """
        index = bisect_left(self.keys, key)
        found = index < len(self.keys) and self.keys[index] == key
        return index, found

    def first_leaf_key(self):
        return self.keys[0]

    def find_leaf(self, key) -> LeafNode:
        return self

    def get_value(self, key):
        index, found = self.find(key)
        return self.values[index] if found else NOT_FOUND

    def iter_range(self, key_low, low_policy: RangePolicy, key_high, high_policy: RangePolicy) -> Iterator[Tuple[Any, Any]]:
        """
        yield (key, value) pairs in the window, walking the leaf chain from self.
        Stops at the first key beyond `key_high`.
        """
        if low_policy is RangePolicy.Inclusive:
            start = bisect_left(self.keys, key_low)
        else:
            start = bisect_right(self.keys, key_low)

        node = self
        while node is not None:
            for index in range(start, len(node.keys)):
                key = node.keys[index]
                if not high_policy.admits_upper(key, key_high):
                    return
                if low_policy.admits_lower(key, key_low):
                    yield key, node.values[index]
            node = node.next
            start = 0

    def get_range(self, key_low, low_policy: RangePolicy, key_high, high_policy: RangePolicy) -> list:
        return [value for _, value in self.iter_range(key_low, low_policy, key_high, high_policy)]

    def insert_value(self, key, value) -> bool:
        index, found = self.find(key)
        if found:
            self.values[index] = value
            return False
        self.keys.insert(index, key)
        self.values.insert(index, value)
        return True

    def delete_value(self, key) -> bool:
        index, found = self.find(key)
        if not found:
            return False
        del self.keys[index]
        del self.values[index]
        return True

    def split(self) -> LeafNode:
        sibling = LeafNode(self.branching_factor)
        start = (self.num_keys() + 1) // 2
        sibling.keys = self.keys[start:]
        sibling.values = self.values[start:]
        del self.keys[start:]
        del self.values[start:]

        sibling.next = self.next
        self.next = sibling
        return sibling

    def merge(self, sibling: LeafNode):
        self.keys.extend(sibling.keys)
        self.values.extend(sibling.values)
        self.next = sibling.next
        # sibling is discarded by caller
        sibling.next = None

    def is_overflow(self) -> bool:
        return len(self.values) > self.branching_factor - 1

    def is_underflow(self) -> bool:
        return len(self.values) < self.branching_factor // 2


class InternalNode(Node):
    """
    Holds n separator keys and n+1 children.
    children[i] covers keys in [keys[i-1], keys[i]), with the
    first and last children unbounded below and above respectively.
    """

    node_type = NodeType.NodeInternal

    def __init__(self, branching_factor: int):
        super().__init__(branching_factor)
        self.children: List[Node] = []

    def child_index(self, key) -> int:
        """
        find the child that should contain `key`.
        A key equal to a separator goes to the right of the separator.
        """
        return bisect_right(self.keys, key)

    def get_child(self, key) -> Node:
        return self.children[self.child_index(key)]

    def first_leaf_key(self):
        return self.children[0].first_leaf_key()

    def find_leaf(self, key) -> LeafNode:
        return self.get_child(key).find_leaf(key)

    def get_value(self, key):
        return self.get_child(key).get_value(key)

    def get_range(self, key_low, low_policy: RangePolicy, key_high, high_policy: RangePolicy) -> list:
        return self.get_child(key_low).get_range(key_low, low_policy, key_high, high_policy)

    def insert_value(self, key, value) -> bool:
        child_num = self.child_index(key)
        child = self.children[child_num]
        inserted = child.insert_value(key, value)
        if child.is_overflow():
            sibling = child.split()
            self.insert_child(child_num, sibling)
        return inserted

    def delete_value(self, key) -> bool:
        child_num = self.child_index(key)
        child = self.children[child_num]
        deleted = child.delete_value(key)
        if child.is_underflow() and len(self.children) > 1:
            self.rebalance_child(child_num)
        return deleted

    def insert_child(self, child_num: int, sibling: Node):
        """
        add `sibling`, the split-off right half of children[child_num],
        immediately after it
        """
        self.keys.insert(child_num, sibling.first_leaf_key())
        self.children.insert(child_num + 1, sibling)

    def rebalance_child(self, child_num: int):
        """
        merge the underflowing child at `child_num` with an adjacent sibling.
        The left sibling is preferred. The right node of the pair is always
        absorbed into the left node. If the merged node overflows, it is split
        again, which redistributes entries between the pair.
        """
        left_num = child_num - 1 if child_num > 0 else child_num
        left = self.children[left_num]
        right = self.children[left_num + 1]

        left.merge(right)
        # drop separator between left and right, and the absorbed node
        del self.keys[left_num]
        del self.children[left_num + 1]

        if left.is_overflow():
            sibling = left.split()
            self.insert_child(left_num, sibling)

    def split(self) -> InternalNode:
        start = self.num_keys() // 2 + 1
        sibling = InternalNode(self.branching_factor)
        sibling.keys = self.keys[start:]
        sibling.children = self.children[start:]

        # the key at start - 1 is dropped; the parent's new
        # separator is derived from the sibling's leftmost leaf
        del self.keys[start - 1:]
        del self.children[start:]
        return sibling

    def merge(self, sibling: InternalNode):
        self.keys.append(sibling.first_leaf_key())
        self.keys.extend(sibling.keys)
        self.children.extend(sibling.children)

    def is_overflow(self) -> bool:
        return len(self.children) > self.branching_factor

    def is_underflow(self) -> bool:
        return len(self.children) < (self.branching_factor + 1) // 2


# section: tree


class BPlusTree:
    """
    In-memory ordered key-value container.

    The public interface consists of `search`, `search_range`, `insert`
    and `delete`, and validators. Keys must be mutually comparable; values
    can be anything, including None.

    ```
    tree = BPlusTree(4)
    tree.insert(3, "d")
    tree.search(3)  # "d"
    tree.search_range(0, 10, RangePolicy.Inclusive, RangePolicy.Exclusive)
    ```

    NOTE: the tree is not thread-safe. Concurrent readers are fine only
    when no mutation is in flight.
    """

    def __init__(self, branching_factor: int = DEFAULT_BRANCHING_FACTOR):
        if branching_factor < MIN_BRANCHING_FACTOR:
            raise InvalidConfigurationError(f"Illegal branching factor: {branching_factor}")
        self._branching_factor = branching_factor
        self.root: Node = LeafNode(branching_factor)
        self._size = 0

    @property
    def branching_factor(self) -> int:
        return self._branching_factor

    # section : public interface: search, insert, and delete

    def search(self, key, default=None):
        """
        find value for `key`
        :param key:
        :param default: returned when key is absent
        :return:
        """
        value = self.root.get_value(key)
        return default if value is NOT_FOUND else value

    def search_range(
        self,
        key_low,
        key_high,
        low_policy: RangePolicy = RangePolicy.Inclusive,
        high_policy: RangePolicy = RangePolicy.Inclusive,
    ) -> list:
        """
        values whose keys lie between `key_low` and `key_high`, in ascending key order.
        Bounds are inclusive unless a policy says otherwise.
        """
        return self.root.get_range(key_low, low_policy, key_high, high_policy)

    def items_range(
        self,
        key_low,
        key_high,
        low_policy: RangePolicy = RangePolicy.Inclusive,
        high_policy: RangePolicy = RangePolicy.Inclusive,
    ) -> Iterator[Tuple[Any, Any]]:
        """
        like `search_range` but lazily yields (key, value) pairs
        """
        leaf = self.root.find_leaf(key_low)
        return leaf.iter_range(key_low, low_policy, key_high, high_policy)

    def insert(self, key, value):
        """
        insert `key` with `value`; an existing key has its value replaced
        """
        inserted = self.root.insert_value(key, value)
        if self.root.is_overflow():
            sibling = self.root.split()
            new_root = InternalNode(self._branching_factor)
            new_root.keys.append(sibling.first_leaf_key())
            new_root.children.extend([self.root, sibling])
            self.root = new_root
            logger.debug(f"root split; tree height is now {self.height()}")
        if inserted:
            self._size += 1

    def delete(self, key):
        """
        delete `key`; deleting an absent key does nothing
        """
        deleted = self.root.delete_value(key)
        if isinstance(self.root, InternalNode) and self.root.num_keys() == 0:
            self.root = self.root.children[0]
            logger.debug(f"root collapsed; tree height is now {self.height()}")
        if deleted:
            self._size -= 1

    # section: container protocol

    def __len__(self):
        return self._size

    def __contains__(self, key) -> bool:
        return self.root.get_value(key) is not NOT_FOUND

    def __getitem__(self, key):
        value = self.root.get_value(key)
        if value is NOT_FOUND:
            raise KeyError(key)
        return value

    def __setitem__(self, key, value):
        self.insert(key, value)

    def __delitem__(self, key):
        self.delete(key)

    def __iter__(self):
        return self.keys()

    def leftmost_leaf(self) -> LeafNode:
        node = self.root
        while isinstance(node, InternalNode):
            node = node.children[0]
        return node

    def leaves(self) -> Iterator[LeafNode]:
        """
        walk the leaf chain
        """
        leaf = self.leftmost_leaf()
        while leaf is not None:
            yield leaf
            leaf = leaf.next

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for leaf in self.leaves():
            yield from zip(leaf.keys, leaf.values)

    def keys(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def values(self) -> Iterator[Any]:
        for _, value in self.items():
            yield value

    def height(self) -> int:
        height = 1
        node = self.root
        while isinstance(node, InternalNode):
            node = node.children[0]
            height += 1
        return height

    # section: btree debugging utilities

    def __str__(self):
        """
        breadth first rendering; each line is a level, and each {..}
        group holds the children of one parent
        """
        lines = []
        level = deque([[self.root]])
        while level:
            next_level = deque()
            groups = []
            while level:
                nodes = level.popleft()
                groups.append("{" + ", ".join(str(node) for node in nodes) + "}")
                for node in nodes:
                    if isinstance(node, InternalNode):
                        next_level.append(node.children)
            lines.append(", ".join(groups))
            level = next_level
        return "\n".join(lines) + "\n"

    @staticmethod
    def depth_to_indent(depth: int) -> str:
        return " " * (depth * 4)

    def print_tree(self, node: Node = None, depth: int = 0):
        """
        print entire tree node by node, starting at an optional node
        :param node: root of invocation; not necessarily tree root
        :param depth: depth of current invocation (used for formatting indentation)
        """
        if node is None:
            node = self.root

        indent = self.depth_to_indent(depth)
        if node.node_type == NodeType.NodeLeaf:
            print(f"{indent}leaf (size: {node.num_keys()})")
            for key, value in zip(node.keys, node.values):
                print(f"{indent}{key} - {value!r}")
        else:
            print(f"{indent}internal (size: {node.num_keys()}, children: {len(node.children)})")
            for i, key in enumerate(node.keys):
                print(f"{indent}{i}-key: {key}")
            for child in node.children:
                self.print_tree(child, depth=depth + 1)

    def validate(self) -> bool:
        """
        invoke all sub-validators
        :return:
            raises TreeValidationError on failure
            True on success
        """
        self.validate_ordering()
        self.validate_fanout()
        self.validate_leaf_chain()
        return True

    def validate_ordering(self) -> bool:
        """
        traverse the tree, starting at root, and ensure keys are ordered and
        lie within the bounds set by their ancestors' separators
        """
        stack = [(self.root, None, None)]
        while stack:
            node, lower_bound, upper_bound = stack.pop()
            for i in range(1, node.num_keys()):
                if not node.keys[i - 1] < node.keys[i]:
                    raise TreeValidationError(
                        f"keys must be strictly ascending; found {node.keys[i - 1]} before {node.keys[i]}")
            for key in node.keys:
                if lower_bound is not None and key < lower_bound:
                    raise TreeValidationError(f"key [{key}] below lower bound [{lower_bound}]")
                if upper_bound is not None and key >= upper_bound:
                    raise TreeValidationError(f"key [{key}] not below upper bound [{upper_bound}]")

            if isinstance(node, InternalNode):
                for child_num, child in enumerate(node.children):
                    child_lower = node.keys[child_num - 1] if child_num > 0 else lower_bound
                    child_upper = node.keys[child_num] if child_num < node.num_keys() else upper_bound
                    stack.append((child, child_lower, child_upper))
        return True

    def validate_fanout(self) -> bool:
        """
        check child/value counts, overflow and underflow bounds (the root
        is exempt from underflow), and that all leaves sit at the same depth
        """
        leaf_depths = set()
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            is_root = node is self.root
            if node.is_overflow():
                raise TreeValidationError(f"node {node} overflows")
            if not is_root and node.is_underflow():
                raise TreeValidationError(f"node {node} underflows")

            if node.node_type == NodeType.NodeLeaf:
                if len(node.keys) != len(node.values):
                    raise TreeValidationError(f"leaf {node} has {len(node.values)} values")
                leaf_depths.add(depth)
            else:
                if len(node.children) != node.num_keys() + 1:
                    raise TreeValidationError(
                        f"internal node {node} has {len(node.children)} children")
                if is_root and node.num_keys() == 0:
                    raise TreeValidationError("internal root must have at least one key")
                for child in node.children:
                    stack.append((child, depth + 1))

        if len(leaf_depths) != 1:
            raise TreeValidationError(f"leaves found at multiple depths: {sorted(leaf_depths)}")
        return True

    def validate_leaf_chain(self) -> bool:
        """
        the leaf chain must visit exactly the leaves of the tree,
        left to right, and hold `len(self)` entries
        """
        expected = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, InternalNode):
                stack.extend(reversed(node.children))
            else:
                expected.append(node)

        chained = list(self.leaves())
        if len(chained) != len(expected) or any(a is not b for a, b in zip(chained, expected)):
            raise TreeValidationError(
                f"leaf chain has {len(chained)} leaves; tree has {len(expected)}")

        count = sum(leaf.num_keys() for leaf in chained)
        if count != self._size:
            raise TreeValidationError(f"tree reports size {self._size}; leaves hold {count}")
        return True
