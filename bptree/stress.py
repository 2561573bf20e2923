"""
This is a stub for "stress" tests, which will perform
a large number of random operations or perform them
for a fixed amount of time.

These should compliment, static unit tests, in that they
should run non-deterministically, and thus expose issues
that unit-tests can't catch.
"""
import logging
import itertools
import math
import random

from .constants import (
    STRESS_BRANCHING_FACTOR,
    STRESS_NUM_PERMS,
    STRESS_PERM_STEP,
)


logger = logging.getLogger(__name__)

STRESS_TREE = "stress"

TEST_CASES = [
    [1, 2, 3, 4],
    [64, 5, 13, 82],
    [82, 13, 5, 2, 0],
    [10, 20, 30, 40, 50, 60, 70],
    [72, 79, 96, 38, 47],
    [432, 507, 311, 35, 246, 950, 956, 929, 769, 744, 994, 438],
    [159, 597, 520, 189, 822, 725, 504, 397, 218, 134, 516],
    [960, 267, 947, 400, 795, 327, 464, 884, 667, 870, 92],
    [229, 653, 248, 298, 801, 947, 63, 619, 475, 422, 856, 57, 38],
    [103, 394, 484, 380, 834, 677, 604, 611, 952, 71, 568, 291, 433, 305],
    [15, 382, 653, 668, 139, 70, 828, 17, 891, 121, 175, 642, 491, 281, 920],
    [726, 361, 583, 121, 908, 789, 842, 67, 871, 461, 522, 394, 225, 637, 792, 393, 656, 748, 39, 696],
]


def read_keys(shell) -> list:
    """
    select every row of the stress tree and return its keys
    """
    resp = shell.handle_input(f"select from {STRESS_TREE}")
    assert resp.success, f"select failed with {resp.error_message}"
    return [key for key, _ in shell.get_pipe().read_all()]


def run_add_del_stress_test(shell, insert_keys, del_keys, branching_factor: int = STRESS_BRANCHING_FACTOR):
    """
    insert all keys, then delete them in the order of `del_keys`,
    validating the tree and its contents after every delete

    :param shell: TreeShell
    :param insert_keys:
    :param del_keys:
    :param branching_factor:
    :return:
    """
    shell.nuke()

    logger.info(f"running test case: {insert_keys} {del_keys}")

    cmd = f"create tree {STRESS_TREE} branching {branching_factor}"
    resp = shell.handle_input(cmd)
    assert resp.success, f"cmd {cmd} failed with {resp.error_message}"

    for key in insert_keys:
        cmd = f"insert into {STRESS_TREE} values ({key}, 'value {key}')"
        logger.debug(f"handling [{cmd}]")
        resp = shell.handle_input(cmd)
        assert resp.success, f"cmd {cmd} failed with {resp.error_message}"
        shell.state_manager.validate_tree(STRESS_TREE)

    # delete and validate
    for idx, key in enumerate(del_keys):
        cmd = f"delete from {STRESS_TREE} where key = {key}"
        logger.debug(f"handling [{cmd}]")
        resp = shell.handle_input(cmd)
        assert resp.success, f"cmd {cmd} failed with {resp.error_message}"

        # ensure tree is valid
        shell.state_manager.validate_tree(STRESS_TREE)

        # check if all keys we expect are there in result
        expected = sorted(set(del_keys[idx + 1:]))
        actual = read_keys(shell)
        assert actual == expected, f"expected: {expected}; received {actual}"


def run_add_del_stress_suite(shell, num_perms: int = STRESS_NUM_PERMS):
    """
    Perform a large number of add/del operation
    and validate btree correctness.
    :return:
    """
    for test_case in TEST_CASES:
        insert_keys = test_case

        # there is a large number of perms ~O(n!)
        # and they are generated in a predictable order
        # we'll skip based on fixed step
        total_perms = math.factorial(len(insert_keys))
        del_perms = []

        step_size = min(total_perms // num_perms, STRESS_PERM_STEP)
        # iterator over permutations
        perm_iter = itertools.permutations(insert_keys)

        while len(del_perms) < num_perms:
            for _ in range(step_size - 1):
                # skip n-1 deletes
                next(perm_iter)
            del_perms.append(list(next(perm_iter)))

        for del_keys in del_perms:
            try:
                run_add_del_stress_test(shell, insert_keys, del_keys)
            except Exception as e:
                logger.error(f"stress test failed on: {insert_keys} {del_keys} with {e}")
                raise


def run_random_stress_test(shell, num_ops: int, key_space: int, seed: int = None,
                           branching_factor: int = STRESS_BRANCHING_FACTOR):
    """
    perform `num_ops` random inserts and deletes, checking the tree
    against a reference dict after every op
    """
    rng = random.Random(seed)
    shell.nuke()
    resp = shell.handle_input(f"create tree {STRESS_TREE} branching {branching_factor}")
    assert resp.success, resp.error_message
    tree = shell.state_manager.get_tree(STRESS_TREE)

    reference = {}
    for _ in range(num_ops):
        key = rng.randrange(key_space)
        if rng.random() < 0.6:
            resp = shell.handle_input(f"insert into {STRESS_TREE} values ({key}, {key * 10})")
            reference[key] = key * 10
        else:
            resp = shell.handle_input(f"delete from {STRESS_TREE} where key = {key}")
            reference.pop(key, None)
        assert resp.success, resp.error_message

        tree.validate()
        assert list(tree.items()) == sorted(reference.items())
        assert len(tree) == len(reference)
