"""Ordered alphabet over the symbols of a sequence

The transforms only need two things from the symbols: equality and a total order.
Alphabet collects the distinct symbols of a sequence, sorts them with python's natural ordering
(ordinal order for single characters and for uint8 values) and assigns each symbol its rank.

Working with ranks instead of the symbols themselves lets the rotation ranking run on numpy integer arrays,
and gives the inverse transform the per-symbol cumulative counts (the "C" table) in a single pass.
"""

from typing import Any, Dict, List, Sequence
import pytest

from bwtlib.core.errors import InvalidInputError

Symbol = Any


class Alphabet:
    """sorted set of symbols with a symbol -> rank lookup"""

    def __init__(self, symbols: List[Symbol]):
        """
        Args:
            symbols (List[Symbol]): distinct symbols, already in ascending order
        """
        self.symbols = symbols
        self.rank_dict: Dict[Symbol, int] = {s: r for r, s in enumerate(symbols)}

    @classmethod
    def from_sequence(cls, data_list: Sequence[Symbol]) -> "Alphabet":
        """build the alphabet of the given sequence

        Raises:
            InvalidInputError: if the symbols cannot be totally ordered (for eg: a mix of str and int)
        """
        try:
            symbols = sorted(set(data_list))
        except TypeError as e:
            raise InvalidInputError(f"symbols cannot be ordered: {e}") from e
        return cls(symbols)

    @property
    def size(self) -> int:
        return len(self.symbols)

    def rank(self, symbol: Symbol) -> int:
        return self.rank_dict[symbol]

    def to_ranks(self, data_list: Sequence[Symbol]) -> List[int]:
        """maps every symbol of data_list to its rank in the alphabet"""
        return [self.rank_dict[s] for s in data_list]

    def get_counts(self, data_list: Sequence[Symbol]) -> List[int]:
        """number of occurrences of each alphabet symbol (indexed by rank)"""
        counts = [0] * self.size
        for s in data_list:
            counts[self.rank_dict[s]] += 1
        return counts

    @staticmethod
    def get_cumulative_counts(counts: List[int]) -> List[int]:
        """C[r] = number of symbols with rank < r

        This is where the first symbol of rank r lands in the sorted (first) column.
        """
        cum_counts = []
        _sum = 0
        for c in counts:
            cum_counts.append(_sum)
            _sum += c
        return cum_counts


def validate_sequence(data_list: Sequence[Symbol]):
    """checks that data_list is a non-empty sequence of symbols

    Raises:
        InvalidInputError: if the sequence is None or empty
    """
    if data_list is None or len(data_list) == 0:
        raise InvalidInputError("the transform is not defined on an empty sequence")


def test_alphabet_ranks():
    alphabet = Alphabet.from_sequence("BANANA")
    assert alphabet.symbols == ["A", "B", "N"]
    assert alphabet.to_ranks("BANANA") == [1, 0, 2, 0, 2, 0]
    assert alphabet.rank("N") == 2

    # uint8 symbols use the byte value order
    alphabet = Alphabet.from_sequence(b"\xff\x00\x10")
    assert alphabet.symbols == [0, 16, 255]


def test_cumulative_counts():
    alphabet = Alphabet.from_sequence("NNBAAA")
    counts = alphabet.get_counts("NNBAAA")
    assert counts == [3, 1, 2]
    assert Alphabet.get_cumulative_counts(counts) == [0, 3, 4]


def test_unorderable_symbols():
    with pytest.raises(InvalidInputError):
        Alphabet.from_sequence(["A", 1, "B"])

    with pytest.raises(InvalidInputError):
        validate_sequence([])
