import bitarray
from bitarray.util import ba2int, int2ba
import numpy as np


# remap bitarray.bitarray
BitArray = bitarray.bitarray


def uint_to_bitarray(x: int, bit_width=None) -> BitArray:
    """
    converts an unsigned int to bits.
    if bit_width is provided then the bitarray is zero-padded (on the left) to bit_width bits
    """
    assert isinstance(x, (int, np.integer))
    return int2ba(int(x), length=bit_width)  # int2ba requires a python int


def bitarray_to_uint(bit_array: BitArray) -> int:
    return ba2int(bit_array)


############################## TESTS ####################################


def test_bitarray_to_uint():
    b = uint_to_bitarray(4)
    assert len(b) == 3
    assert bitarray_to_uint(b) == 4

    b = uint_to_bitarray(13, bit_width=32)
    assert len(b) == 32
    assert bitarray_to_uint(b) == 13

    # numpy ints are accepted too
    assert bitarray_to_uint(uint_to_bitarray(np.int64(7), bit_width=8)) == 7
