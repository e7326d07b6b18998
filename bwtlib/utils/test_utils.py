"""
Utility functions useful for testing
"""

import filecmp
import os
import tempfile
from typing import List, Tuple

import numpy as np

from bwtlib.core.data_block import DataBlock
from bwtlib.core.data_encoder_decoder import DataDecoder, DataEncoder
from bwtlib.core.data_stream import Uint8FileDataStream
from bwtlib.utils.bitarray_utils import BitArray


def get_random_data_block(alphabet: List, size: int, seed: int = None, p: List[float] = None) -> DataBlock:
    """generates i.i.d random data over the given alphabet

    Args:
        alphabet (List): symbols to draw from
        size (int): size of the block to be returned
        seed (int): random seed used to generate the data
        p (List[float], optional): probability of each symbol. Defaults to uniform.
    """
    rng = np.random.default_rng(seed)
    data = rng.choice(alphabet, size=size, p=p)
    return DataBlock(data.tolist())


def create_random_binary_file(file_path: str, file_size: int, alphabet: List = None, seed: int = None):
    """creates a binary file of random bytes drawn from alphabet (defaults to all 256 byte values)"""
    if alphabet is None:
        alphabet = list(range(256))
    data_block = get_random_data_block(alphabet, file_size, seed=seed)
    with Uint8FileDataStream(file_path, "wb") as fds:
        fds.write_block(data_block)


def try_lossless_compression(
    data_block: DataBlock,
    encoder: DataEncoder,
    decoder: DataDecoder,
    add_extra_bits_to_encoder_output: bool = False,
    seed: int = None,
) -> Tuple[bool, int, BitArray]:
    """Encodes the data_block and returns True if decoding gives back the same block

    Args:
        data_block (DataBlock): input data_block to encode
        encoder (DataEncoder): Encoder obj
        decoder (DataDecoder): Decoder obj to test with
        add_extra_bits_to_encoder_output (bool, optional): append a random number of slack bits to the encoder output,
        to check the decoder consumes exactly its own bits (as when several encoder outputs are concatenated).
        Defaults to False.
        seed (int, optional): random seed used to generate the slack bits

    Returns:
        Tuple[bool, int, BitArray]: whether encoding is lossless, size of the output block, encoded bitarray
    """
    encoded_bitarray = encoder.encode_block(data_block)

    encoded_bitarray_extra = BitArray(encoded_bitarray)  # make a copy
    if add_extra_bits_to_encoder_output:
        rng = np.random.default_rng(seed)
        num_extra_bits = int(rng.integers(100))
        encoded_bitarray_extra += BitArray(rng.integers(0, 2, size=num_extra_bits).tolist())

    decoded_block, num_bits_consumed = decoder.decode_block(encoded_bitarray_extra)
    assert num_bits_consumed == len(encoded_bitarray), "Decoder did not consume all bits"

    return decoded_block == data_block, num_bits_consumed, encoded_bitarray


def try_file_lossless_compression(
    input_file_path: str, encoder: DataEncoder, decoder: DataDecoder, encode_block_size=1000
):
    """encode the input file, decode it back, and check the decoded file matches the input"""
    with tempfile.TemporaryDirectory() as tmpdirname:
        encoded_file_path = os.path.join(tmpdirname, "encoded_file.bin")
        reconst_file_path = os.path.join(tmpdirname, "reconst_file.bin")

        encoder.encode_file(input_file_path, encoded_file_path, block_size=encode_block_size)
        decoder.decode_file(encoded_file_path, reconst_file_path)

        return filecmp.cmp(input_file_path, reconst_file_path, shallow=False)
