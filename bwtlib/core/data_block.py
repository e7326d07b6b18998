from typing import Dict, List


class DataBlock:
    """
    wrapper around a list of symbols.

    The data_block is the unit the transforms (and the block coders) operate on:
    the forward transform maps a DataBlock to a permuted DataBlock (plus the rotation index),
    and the inverse transform maps it back.

    Utility functions useful for looking at what the transform does:
    - size
    - counts
    - num_runs (the BWT groups equal symbols together, so the number of runs typically drops)
    """

    def __init__(self, data_list: List):
        self.data_list = data_list

    def __repr__(self):
        return f"DataBlock({self.data_list!r})"

    def __eq__(self, other):
        if not isinstance(other, DataBlock):
            return NotImplemented
        return list(self.data_list) == list(other.data_list)

    @property
    def size(self):
        return len(self.data_list)

    def get_counts(self) -> Dict:
        """returns a dictionary of counts {symbol: count, ...} for symbols in self.data_list"""
        count_dict = {}
        for d in self.data_list:
            count_dict[d] = count_dict.get(d, 0) + 1
        return count_dict

    def get_num_runs(self) -> int:
        """number of maximal runs of identical consecutive symbols

        for e.g: [A,A,B,A] -> 3 runs (AA, B, A)
        """
        num_runs = 0
        prev = None
        for ind, d in enumerate(self.data_list):
            if ind == 0 or d != prev:
                num_runs += 1
            prev = d
        return num_runs

    def is_permutation_of(self, other: "DataBlock") -> bool:
        """True if both blocks contain the same multiset of symbols"""
        return self.size == other.size and self.get_counts() == other.get_counts()


def test_data_block_basic_ops():
    """checks basic operations for a DataBlock"""
    data_list = [0, 1, 0, 0, 1, 1]

    # create data block object
    data_block = DataBlock(data_list)

    # check size
    assert data_block.size == 6

    # check counts
    counts_dict = data_block.get_counts()
    assert counts_dict[0] == 3

    # check runs
    assert data_block.get_num_runs() == 4
    assert DataBlock([]).get_num_runs() == 0


def test_data_block_permutation():
    assert DataBlock(list("NNBAAA")).is_permutation_of(DataBlock(list("BANANA")))
    assert not DataBlock(list("NNBAAB")).is_permutation_of(DataBlock(list("BANANA")))
    assert DataBlock(list("AB")) == DataBlock(["A", "B"])
