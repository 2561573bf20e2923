"""
Registry of named trees; the virtual machine reads and
writes trees exclusively through this class.
"""
from typing import Dict, List, Optional

from .btree import BPlusTree
from .constants import DEFAULT_BRANCHING_FACTOR


class StateManager:
    """
    Owns every tree known to a shell session
    """

    def __init__(self):
        # tree name -> tree
        self.trees: Dict[str, BPlusTree] = {}

    def tree_exists(self, tree_name: str) -> bool:
        return tree_name in self.trees

    def create_tree(self, tree_name: str, branching_factor: Optional[int] = None) -> BPlusTree:
        """
        allocate a new tree
        raises InvalidConfigurationError if branching_factor is illegal
        """
        assert not self.tree_exists(tree_name), f"tree {tree_name} exists"
        if branching_factor is None:
            branching_factor = DEFAULT_BRANCHING_FACTOR
        tree = BPlusTree(branching_factor)
        self.trees[tree_name] = tree
        return tree

    def drop_tree(self, tree_name: str):
        del self.trees[tree_name]

    def get_tree(self, tree_name: str) -> BPlusTree:
        return self.trees[tree_name]

    def get_tree_names(self) -> List[str]:
        return sorted(self.trees)

    def print_tree(self, tree_name: str):
        """
        This method prints the tree
        Putting this here, since the state manager encapsulates trees
        :return:
        """
        self.get_tree(tree_name).print_tree()

    def validate_tree(self, tree_name: str):
        self.get_tree(tree_name).validate()

    def reset(self):
        self.trees = {}
