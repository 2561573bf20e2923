"""
Node level tests; these exercise split, merge and the
overflow/underflow thresholds directly, without a tree.
"""
from .context import LeafNode, InternalNode, RangePolicy, NOT_FOUND


def make_leaf(branching_factor, keys):
    leaf = LeafNode(branching_factor)
    for key in keys:
        leaf.insert_value(key, f"v{key}")
    return leaf


def make_internal(branching_factor, keys, child_keys):
    """
    internal node with one single-key leaf child per entry in `child_keys`
    """
    node = InternalNode(branching_factor)
    node.keys = list(keys)
    node.children = [make_leaf(branching_factor, [key]) for key in child_keys]
    for left, right in zip(node.children, node.children[1:]):
        left.next = right
    return node


# leaf


def test_leaf_insert_keeps_order_and_updates():
    leaf = make_leaf(8, [5, 1, 3])
    assert leaf.keys == [1, 3, 5]
    assert leaf.values == ["v1", "v3", "v5"]

    assert leaf.insert_value(3, "new") is False
    assert leaf.values == ["v1", "new", "v5"]
    assert leaf.insert_value(4, "v4") is True
    assert leaf.keys == [1, 3, 4, 5]


def test_leaf_get_value():
    leaf = make_leaf(8, [1, 2])
    assert leaf.get_value(2) == "v2"
    assert leaf.get_value(3) is NOT_FOUND


def test_leaf_delete():
    leaf = make_leaf(8, [1, 2, 3])
    assert leaf.delete_value(2) is True
    assert leaf.delete_value(2) is False
    assert leaf.keys == [1, 3]
    assert leaf.values == ["v1", "v3"]


def test_leaf_thresholds():
    # branching factor 4: at most 3 entries, at least 2
    leaf = make_leaf(4, [1, 2, 3])
    assert not leaf.is_overflow()
    leaf.insert_value(4, "v4")
    assert leaf.is_overflow()

    leaf = make_leaf(4, [1, 2])
    assert not leaf.is_underflow()
    leaf.delete_value(1)
    assert leaf.is_underflow()

    # branching factor 5: at most 4 entries, at least 2
    leaf = make_leaf(5, [1, 2, 3, 4])
    assert not leaf.is_overflow()
    assert not make_leaf(5, [1, 2]).is_underflow()
    assert make_leaf(5, [1]).is_underflow()


def test_leaf_split_even():
    leaf = make_leaf(4, [1, 2, 3, 4])
    tail = make_leaf(4, [9])
    leaf.next = tail

    sibling = leaf.split()
    assert leaf.keys == [1, 2]
    assert sibling.keys == [3, 4]
    assert sibling.values == ["v3", "v4"]
    assert sibling.first_leaf_key() == 3
    assert leaf.next is sibling
    assert sibling.next is tail


def test_leaf_split_odd():
    leaf = make_leaf(5, [1, 2, 3, 4, 5])
    sibling = leaf.split()
    assert leaf.keys == [1, 2, 3]
    assert sibling.keys == [4, 5]


def test_leaf_merge_adopts_next():
    left = make_leaf(4, [1])
    right = make_leaf(4, [2, 3])
    tail = make_leaf(4, [9])
    left.next = right
    right.next = tail

    left.merge(right)
    assert left.keys == [1, 2, 3]
    assert left.values == ["v1", "v2", "v3"]
    assert left.next is tail


def test_leaf_next_is_not_owning():
    leaf = make_leaf(4, [1])
    sibling = make_leaf(4, [2])
    leaf.next = sibling
    assert leaf.next is sibling
    del sibling
    assert leaf.next is None


def test_leaf_range_walks_chain():
    first = make_leaf(4, [1, 2, 3])
    second = make_leaf(4, [4, 5])
    third = make_leaf(4, [6, 7])
    first.next = second
    second.next = third

    assert first.get_range(2, RangePolicy.Inclusive, 6, RangePolicy.Inclusive) == ["v2", "v3", "v4", "v5", "v6"]
    assert first.get_range(2, RangePolicy.Exclusive, 6, RangePolicy.Exclusive) == ["v3", "v4", "v5"]
    assert list(second.iter_range(4, RangePolicy.Inclusive, 100, RangePolicy.Inclusive)) == [
        (4, "v4"), (5, "v5"), (6, "v6"), (7, "v7")]


# internal


def test_child_selection():
    node = make_internal(4, [10, 20], [5, 10, 20])
    assert node.child_index(5) == 0
    # equal to separator goes right
    assert node.child_index(10) == 1
    assert node.child_index(15) == 1
    assert node.child_index(20) == 2
    assert node.child_index(25) == 2
    assert node.get_value(10) == "v10"
    assert node.get_value(11) is NOT_FOUND


def test_internal_thresholds():
    # branching factor 4: at most 4 children, at least 2
    node = make_internal(4, [10, 20, 30], [5, 10, 20, 30])
    assert not node.is_overflow()
    node = make_internal(4, [10, 20, 30, 40], [5, 10, 20, 30, 40])
    assert node.is_overflow()
    assert not make_internal(4, [10], [5, 10]).is_underflow()
    assert make_internal(4, [], [5]).is_underflow()

    # branching factor 5: at least 3 children
    assert make_internal(5, [10], [5, 10]).is_underflow()
    assert not make_internal(5, [10, 20], [5, 10, 20]).is_underflow()


def test_internal_split():
    node = make_internal(4, [10, 20, 30, 40], [5, 10, 20, 30, 40])
    sibling = node.split()

    assert node.keys == [10, 20]
    assert [child.keys for child in node.children] == [[5], [10], [20]]
    assert sibling.keys == [40]
    assert [child.keys for child in sibling.children] == [[30], [40]]
    # promoted separator comes from the sibling's leftmost leaf
    assert sibling.first_leaf_key() == 30


def test_internal_merge():
    left = make_internal(4, [10], [5, 10])
    right = make_internal(4, [30], [20, 30])
    left.merge(right)
    assert left.keys == [10, 20, 30]
    assert [child.keys for child in left.children] == [[5], [10], [20], [30]]
    assert len(left.children) == left.num_keys() + 1


def test_internal_insert_splits_child():
    leaf = make_leaf(4, [1, 2, 3])
    node = InternalNode(4)
    node.keys = [10]
    node.children = [leaf, make_leaf(4, [10, 11])]
    leaf.next = node.children[1]

    assert node.insert_value(4, "v4") is True
    assert node.keys == [3, 10]
    assert [child.keys for child in node.children] == [[1, 2], [3, 4], [10, 11]]
    assert node.children[0].next is node.children[1]
    assert node.children[1].next is node.children[2]


def test_internal_delete_merges_with_left_sibling():
    node = InternalNode(4)
    node.children = [make_leaf(4, [1, 2]), make_leaf(4, [5, 6]), make_leaf(4, [8, 9])]
    node.keys = [5, 8]
    node.children[0].next = node.children[1]
    node.children[1].next = node.children[2]

    assert node.delete_value(6) is True
    assert node.keys == [8]
    assert [child.keys for child in node.children] == [[1, 2, 5], [8, 9]]
    assert node.children[0].next is node.children[1]


def test_internal_delete_merges_first_child_with_right_sibling():
    node = InternalNode(4)
    node.children = [make_leaf(4, [1, 2]), make_leaf(4, [5, 6]), make_leaf(4, [8, 9])]
    node.keys = [5, 8]
    node.children[0].next = node.children[1]
    node.children[1].next = node.children[2]

    node.delete_value(1)
    assert node.keys == [8]
    assert [child.keys for child in node.children] == [[2, 5, 6], [8, 9]]


def test_internal_delete_redistributes_on_merge_overflow():
    node = InternalNode(4)
    node.children = [make_leaf(4, [1, 2, 3]), make_leaf(4, [5, 6])]
    node.keys = [5]
    node.children[0].next = node.children[1]

    node.delete_value(5)
    # [1, 2, 3] + [6] overflows and is split again
    assert [child.keys for child in node.children] == [[1, 2], [3, 6]]
    assert node.keys == [3]
