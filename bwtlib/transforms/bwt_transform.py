"""Burrows-Wheeler Transform (forward and inverse)

The BWT is a reversible permutation of a sequence which tends to group equal symbols into runs,
which is why it is used as a preprocessing stage for compression (bzip2 being the well known example).
https://en.wikipedia.org/wiki/Burrows%E2%80%93Wheeler_transform

Forward transform:
- consider all the N cyclic rotations of the input, and sort them (see rotation_ranking.py)
- the encoded sequence is the last symbol of every sorted rotation (the "last" column L)
- the index is the sorted position of the unrotated input

For example, for BANANA:

    ABANAN      k=5
    ANABAN      k=3
    ANANAB      k=1
    BANANA  <-- k=0, index=3
    NABANA      k=4
    NANABA      k=2

    -> encoded = NNBAAA, index = 3

Inverse transform:
- the first column F is just the encoded symbols in sorted order, so it is known from L alone.
- the i-th occurrence of a symbol in L and the i-th occurrence of the same symbol in F correspond to the same
  position of the original sequence (this needs equal rotations to be sorted by ascending offset, which
  rotation_ranking guarantees). So a single counting pass over L gives, for every row of F, the row of L
  holding the same symbol occurrence; following these links from `index` spells the input from left to right.

Periodic inputs u^m (including the all-identical case) are handled without any special casing: the links then
form m cycles each of length |u|, and walking N steps from `index` just goes around the cycle m times.

No delimiter symbol is appended: the rotation index is what makes the transform invertible.
"""

from typing import List, Sequence, Tuple

import numpy as np
import pytest

from bwtlib.core.alphabet import Alphabet, Symbol, validate_sequence
from bwtlib.core.data_block import DataBlock
from bwtlib.core.errors import CorruptEncodingError, InvalidInputError
from bwtlib.transforms.rotation_ranking import rank_rotations
from bwtlib.utils.test_utils import get_random_data_block


def bwt_forward(data: Sequence[Symbol]) -> Tuple[List[Symbol], int]:
    """forward BWT

    Args:
        data (Sequence[Symbol]): non-empty input (a list of symbols, str or bytes)

    Returns:
        Tuple[List[Symbol], int]: (encoded sequence, index of the unrotated input in sorted order)

    Raises:
        InvalidInputError: empty input, or symbols which cannot be ordered
    """
    validate_sequence(data)
    data_list = list(data)

    order = rank_rotations(data_list)

    # last symbol of rotation k is data_list[k - 1] (python wraps around for k = 0)
    encoded_list = [data_list[k - 1] for k in order]

    # equal rotations are sorted by offset, so this is the first row equal to the input
    index = order.index(0)
    return encoded_list, index


def _validate_index(index, n: int):
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        raise InvalidInputError(f"index should be an integer, got {type(index).__name__}")
    if not (0 <= index < n):
        raise InvalidInputError(f"index {index} out of range [0, {n})")


def bwt_inverse(encoded: Sequence[Symbol], index: int) -> List[Symbol]:
    """inverse BWT

    Args:
        encoded (Sequence[Symbol]): the encoded (last column) sequence
        index (int): sorted position of the original sequence, as returned by bwt_forward

    Returns:
        List[Symbol]: the original sequence

    Raises:
        InvalidInputError: empty encoded sequence, or index not in [0, N)
        CorruptEncodingError: the (encoded, index) pair was not produced by bwt_forward
    """
    validate_sequence(encoded)
    n = len(encoded)
    _validate_index(index, n)
    encoded_list = list(encoded)

    alphabet = Alphabet.from_sequence(encoded_list)
    counts = alphabet.get_counts(encoded_list)

    # next free row of the first column for every symbol (starts at the cumulative count)
    first_row = Alphabet.get_cumulative_counts(counts)

    # first_column[i] -> symbol in row i of F
    # next_row[i] -> row of L holding the same occurrence of first_column[i];
    #                the first column of that row has the next symbol of the input
    first_column = [None] * n
    next_row = [0] * n
    for j, symbol in enumerate(encoded_list):
        r = alphabet.rank(symbol)
        i = first_row[r]
        first_row[r] += 1
        first_column[i] = symbol
        next_row[i] = j

    decoded_list = []
    cycle_len = None
    curr = index
    for step in range(n):
        decoded_list.append(first_column[curr])
        curr = next_row[curr]
        if cycle_len is None and curr == index:
            cycle_len = step + 1

    # a valid encoding of u^m decodes through a cycle of length |u|, repeated m times
    if n % cycle_len != 0:
        raise CorruptEncodingError(f"cycle of length {cycle_len} through index {index} does not divide {n}")
    if alphabet.get_counts(decoded_list) != counts:
        raise CorruptEncodingError("decoded symbols are not a permutation of the encoded symbols")

    return decoded_list


class BurrowsWheelerTransform:
    """BWT forward/inverse on DataBlocks

    NOTE: for consistency all forward and inverse functions take in a DataBlock
    """

    def __init__(self, verify_inverse: bool = False):
        """
        Args:
            verify_inverse (bool, optional): re-run the forward transform on the output of inverse, and
            raise CorruptEncodingError unless it gives back the same (encoded, index) pair.
            Catches every invalid pair, at the cost of an extra forward transform. Defaults to False.
        """
        self.verify_inverse = verify_inverse

    def forward(self, data_block: DataBlock) -> Tuple[DataBlock, int]:
        encoded_list, index = bwt_forward(data_block.data_list)
        return DataBlock(encoded_list), index

    def forward_naive(self, data_block: DataBlock) -> Tuple[DataBlock, int]:
        """forward BWT by explicitly building and sorting all rotations (O(N^2) memory)

        Only meant as a reference for testing.
        """
        data_list = list(data_block.data_list)
        validate_sequence(data_list)
        n = len(data_list)
        rotations = [data_list[k:] + data_list[:k] for k in range(n)]

        # stable sort over ascending k
        order = sorted(range(n), key=lambda k: rotations[k])
        encoded_list = [rotations[k][-1] for k in order]
        return DataBlock(encoded_list), order.index(0)

    def inverse(self, bwt_block: DataBlock, index: int) -> DataBlock:
        decoded_list = bwt_inverse(bwt_block.data_list, index)

        if self.verify_inverse:
            reencoded_list, reencoded_index = bwt_forward(decoded_list)
            if reencoded_list != list(bwt_block.data_list) or reencoded_index != index:
                raise CorruptEncodingError("inverse output does not transform back to the encoded block")

        return DataBlock(decoded_list)


#########################################


def test_bwt_known_vector():
    encoded, index = bwt_forward("BANANA")
    assert "".join(encoded) == "NNBAAA"
    assert index == 3
    assert "".join(bwt_inverse("NNBAAA", 3)) == "BANANA"


def test_bwt_single_symbol():
    assert bwt_forward("X") == (["X"], 0)
    assert bwt_inverse("X", 0) == ["X"]


def test_bwt_all_identical_symbols():
    """every rotation is identical, the tie-break alone makes this invertible"""
    for n in range(1, 40):
        encoded, index = bwt_forward("A" * n)
        assert encoded == ["A"] * n
        assert index == 0
        assert bwt_inverse(encoded, index) == ["A"] * n


def test_bwt_periodic_inputs():
    for sample_input in ["ABAB", "abcabcabc", "aabaab", "xyxyxyxyxyxy", "ABABA"]:
        encoded, index = bwt_forward(sample_input)
        assert "".join(bwt_inverse(encoded, index)) == sample_input


def test_bwt_transform_samples():
    bwt_transform = BurrowsWheelerTransform()

    sample_inputs = ["BANANA", "abracadabraabracadabraabracadabra", "hakunamatata", "mississippi"]
    for sample_input in sample_inputs:
        print("\n" + "-" * 20)
        print(f"Input string: {sample_input}")

        block = DataBlock(list(sample_input))
        bwt_block, index = bwt_transform.forward(block)
        print(f"BWT transformed string: {''.join(bwt_block.data_list)}, index: {index}")

        # the naive rendition should give exactly the same output
        assert bwt_transform.forward_naive(block) == (bwt_block, index)

        # permutation, index validity
        assert bwt_block.is_permutation_of(block)
        assert 0 <= index < block.size

        inv_block = bwt_transform.inverse(bwt_block, index)
        assert "".join(inv_block.data_list) == sample_input

        # forward is deterministic: forward(inverse(forward(x))) == forward(x)
        assert bwt_transform.forward(inv_block) == (bwt_block, index)


def test_bwt_random_round_trip():
    """round trip on random uint8 blocks, over small and large alphabets"""
    bwt_transform = BurrowsWheelerTransform(verify_inverse=True)
    for seed, (alphabet, size) in enumerate([([0, 1], 500), (list(range(4)), 1000), (list(range(256)), 2000)]):
        data_block = get_random_data_block(alphabet, size, seed=seed)
        bwt_block, index = bwt_transform.forward(data_block)
        assert bwt_block.is_permutation_of(data_block)
        assert bwt_transform.inverse(bwt_block, index) == data_block

        # cross-check against the naive transform on a prefix
        small_block = DataBlock(data_block.data_list[:100])
        assert bwt_transform.forward(small_block) == bwt_transform.forward_naive(small_block)


def test_bwt_bytes_input():
    encoded, index = bwt_forward(b"banana")
    assert bytes(encoded) == b"nnbaaa"
    assert bytes(bwt_inverse(encoded, index)) == b"banana"


def test_bwt_groups_runs():
    """the encoded text has fewer runs than the input on repetitive text"""
    text = "she sells sea shells by the sea shore, the shells she sells are sea shells " * 4
    data_block = DataBlock(list(text))
    bwt_block, _ = BurrowsWheelerTransform().forward(data_block)
    assert bwt_block.get_num_runs() < data_block.get_num_runs()


def test_bwt_invalid_input():
    with pytest.raises(InvalidInputError):
        bwt_forward("")
    with pytest.raises(InvalidInputError):
        bwt_forward([])
    with pytest.raises(InvalidInputError):
        bwt_inverse("", 0)
    with pytest.raises(InvalidInputError):
        bwt_inverse("NNBAAA", 6)
    with pytest.raises(InvalidInputError):
        bwt_inverse("NNBAAA", -1)
    with pytest.raises(InvalidInputError):
        bwt_inverse("NNBAAA", 1.0)
    with pytest.raises(InvalidInputError):
        bwt_forward(["A", 1])

    # InvalidInputError is also a ValueError
    with pytest.raises(ValueError):
        bwt_inverse("X", 1)


def test_bwt_corrupt_encoding():
    # for "ABC" the links form a cycle of length 1 (A->A), then B, C; 1 divides 3 but the output AAA
    # is not a permutation of the input
    with pytest.raises(CorruptEncodingError):
        bwt_inverse("ABC", 0)

    # cycle of length 2 through index 0 for a block of size 3
    with pytest.raises(CorruptEncodingError):
        bwt_inverse("BAC", 0)

    # links form cycles AABB, AB, AB: passes the cheap checks and decodes to AABBAABB,
    # whose transform is BBAABBAA. Only re-running forward catches it.
    assert "".join(bwt_inverse("BBBABAAA", 0)) == "AABBAABB"
    with pytest.raises(CorruptEncodingError):
        BurrowsWheelerTransform(verify_inverse=True).inverse(DataBlock(list("BBBABAAA")), 0)

    # any index of a primitive input is valid: it decodes to the corresponding rotation
    assert BurrowsWheelerTransform(verify_inverse=True).inverse(DataBlock(list("NNBAAA")), 2) == DataBlock(
        list("ANANAB")
    )
