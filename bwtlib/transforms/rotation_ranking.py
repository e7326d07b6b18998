"""Ordering of the cyclic rotations of a sequence

The forward BWT needs the N cyclic rotations of the input in sorted order. Materializing them
takes O(N^2) memory, so here a rotation is represented only by its start offset k
(rotation k = data[k:] + data[:k]) and the rotations are compared through indexed lookups
into the (circular) input.

Two renditions are provided:

- rank_rotations_naive: stable python sort using compare_rotations as the comparator.
  Simple, O(N^2 log N) in the worst case; mostly useful as a reference in tests.
- rank_rotations: prefix doubling on numpy arrays. Each offset first gets the rank of its symbol.
  In every round, the rank of offset i over the first 2h symbols is obtained by sorting the pairs
  (rank_h[i], rank_h[(i + h) mod N]). After ceil(log2 N) rounds the ranks order the full rotations.
  O(N log^2 N) time, O(N) memory.

Tie-break: rotations which are equal as sequences (periodic inputs, all-identical inputs) are ordered
by ascending offset k. The inverse transform relies on this, as the i-th occurrence of a symbol in the
last column must correspond to the i-th occurrence of the same symbol in the first column.
"""

import functools
from typing import List, Sequence

import numpy as np

from bwtlib.core.alphabet import Alphabet, Symbol


def compare_rotations(data_list: Sequence[Symbol], a: int, b: int) -> int:
    """lexicographically compares rotations starting at offsets a and b

    Returns:
        int: -1 if rotation a < rotation b, 1 if rotation a > rotation b, 0 if all N symbols are equal
    """
    n = len(data_list)
    for i in range(n):
        x = data_list[(a + i) % n]
        y = data_list[(b + i) % n]
        if x < y:
            return -1
        if x > y:
            return 1
    return 0


def rank_rotations_naive(data_list: Sequence[Symbol]) -> List[int]:
    """returns rotation offsets in ascending rotation order (reference implementation)"""
    n = len(data_list)
    # sorted() is stable and the offsets are fed in ascending order, so equal rotations stay ordered by offset
    return sorted(range(n), key=functools.cmp_to_key(lambda a, b: compare_rotations(data_list, a, b)))


def _rerank(order: np.ndarray, first: np.ndarray, second: np.ndarray) -> np.ndarray:
    """assign dense ranks to offsets, given the order in which the (first, second) pairs are sorted"""
    sorted_first = first[order]
    sorted_second = second[order]

    # a new rank starts wherever the pair differs from the previous one
    is_new = np.zeros(len(order), dtype=np.int64)
    is_new[1:] = (sorted_first[1:] != sorted_first[:-1]) | (sorted_second[1:] != sorted_second[:-1])

    new_rank = np.empty(len(order), dtype=np.int64)
    new_rank[order] = np.cumsum(is_new)
    return new_rank


def rank_rotations(data_list: Sequence[Symbol]) -> List[int]:
    """returns rotation offsets in ascending rotation order, ties broken by ascending offset

    Args:
        data_list (Sequence[Symbol]): non-empty input sequence

    Returns:
        List[int]: order, where order[i] is the offset of the i-th smallest rotation
    """
    n = len(data_list)
    assert n > 0

    alphabet = Alphabet.from_sequence(data_list)
    rank = np.array(alphabet.to_ranks(data_list), dtype=np.int64)
    offsets = np.arange(n, dtype=np.int64)

    h = 1
    while h < n:
        # rank of the rotation starting h symbols later, i.e. rank[(i + h) % n]
        second = np.roll(rank, -h)
        order = np.lexsort((second, rank))
        rank = _rerank(order, rank, second)

        # all rotations already distinguished
        if rank[order[-1]] == n - 1:
            break
        h *= 2

    order = np.lexsort((offsets, rank))
    return [int(k) for k in order]


################################################


def test_compare_rotations():
    data = "BANANA"
    # rotation 5 = ABANAN, rotation 3 = ANABAN
    assert compare_rotations(data, 5, 3) == -1
    assert compare_rotations(data, 3, 5) == 1
    assert compare_rotations(data, 2, 2) == 0

    # periodic input: rotation 0 and 2 are both ABAB
    assert compare_rotations("ABAB", 0, 2) == 0


def test_rank_rotations_banana():
    # ABANAN(5), ANABAN(3), ANANAB(1), BANANA(0), NABANA(4), NANABA(2)
    expected_order = [5, 3, 1, 0, 4, 2]
    assert rank_rotations_naive("BANANA") == expected_order
    assert rank_rotations("BANANA") == expected_order


def test_rank_rotations_ties():
    """equal rotations must be ordered by ascending offset"""
    assert rank_rotations("AAAA") == [0, 1, 2, 3]
    assert rank_rotations("ABAB") == [0, 2, 1, 3]
    assert rank_rotations([7]) == [0]
    assert rank_rotations("abcabcabc") == [0, 3, 6, 1, 4, 7, 2, 5, 8]


def test_rank_rotations_matches_naive():
    """the prefix doubling ranking should agree with the naive stable sort"""
    rng = np.random.default_rng(0)
    for size in [1, 2, 3, 7, 16, 50, 129]:
        for alphabet_size in [1, 2, 4, 256]:
            data_list = rng.integers(0, alphabet_size, size=size).tolist()
            assert rank_rotations(data_list) == rank_rotations_naive(data_list)

    # periodic inputs, where many rotations tie
    for unit in ["ab", "aab", "abcd", "z"]:
        for repeats in [1, 2, 5]:
            data_list = list(unit * repeats)
            assert rank_rotations(data_list) == rank_rotations_naive(data_list)
