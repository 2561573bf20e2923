import pytest

from .context import TreeShell, run_add_del_stress_test, run_add_del_stress_suite, run_random_stress_test


@pytest.fixture(scope="module")
def shell():
    return TreeShell()


def test_add_del_stress_suite(shell):
    run_add_del_stress_suite(shell)


@pytest.mark.parametrize("branching_factor", [3, 5])
def test_add_del_reverse_order(shell, branching_factor):
    keys = list(range(40))
    run_add_del_stress_test(shell, keys, keys[::-1], branching_factor=branching_factor)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_stress(shell, seed):
    run_random_stress_test(shell, num_ops=300, key_space=60, seed=seed)
