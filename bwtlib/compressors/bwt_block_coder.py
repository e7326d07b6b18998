"""Block-wise BWT coder for byte data

The input is chopped into blocks (see DataEncoder.encode), and each block is replaced by its
Burrows-Wheeler Transform. Every encoded block is stored as:

    [N (32 bits)] [index (32 bits)] [N encoded symbols, 8 bits each]

No entropy coding is done on top of the transform, so the output is slightly larger than the input;
the point is to produce the BWT permuted blocks (which group equal bytes into runs) and to
get the original data back from them.

Usage:
    python -m bwtlib.compressors.bwt_block_coder -i input.txt -o input.bwt
    python -m bwtlib.compressors.bwt_block_coder -d -i input.bwt -o input.txt
"""

import argparse
import logging
import os
import tempfile

import pytest

from bwtlib.core.data_block import DataBlock
from bwtlib.core.data_encoder_decoder import DEFAULT_BLOCK_SIZE, DataDecoder, DataEncoder
from bwtlib.core.data_stream import ListDataStream
from bwtlib.core.encoded_stream import EncodedBlockReader, EncodedBlockWriter
from bwtlib.core.errors import BWTError, CorruptEncodingError, InvalidInputError
from bwtlib.transforms.bwt_transform import BurrowsWheelerTransform
from bwtlib.utils.bitarray_utils import BitArray, bitarray_to_uint, uint_to_bitarray
from bwtlib.utils.log_utils import log, setup_logging
from bwtlib.utils.test_utils import (
    create_random_binary_file,
    get_random_data_block,
    try_file_lossless_compression,
    try_lossless_compression,
)

# block size and index are written with a fixed number of bits
NUM_SIZE_BITS = 32
NUM_SYMBOL_BITS = 8
MAX_BLOCK_SIZE = 1 << NUM_SIZE_BITS


class BWTBlockEncoder(DataEncoder):
    """replaces every block of uint8 data with its (encoded block, index) pair"""

    def __init__(self):
        self.bwt_transform = BurrowsWheelerTransform()

    def encode_block(self, data_block: DataBlock) -> BitArray:
        if data_block.size >= MAX_BLOCK_SIZE:
            raise InvalidInputError(f"block size {data_block.size} too large, max: {MAX_BLOCK_SIZE - 1}")
        for s in data_block.data_list:
            if not (isinstance(s, int) and 0 <= s <= 255):
                raise InvalidInputError(f"BWTBlockEncoder only encodes uint8 symbols, got {s!r}")

        bwt_block, index = self.bwt_transform.forward(data_block)
        log("bwt block of size", bwt_block.size, "index", index, "runs", bwt_block.get_num_runs())

        encoded_bitarray = uint_to_bitarray(bwt_block.size, bit_width=NUM_SIZE_BITS)
        encoded_bitarray += uint_to_bitarray(index, bit_width=NUM_SIZE_BITS)
        symbols_bitarray = BitArray()
        symbols_bitarray.frombytes(bytes(bwt_block.data_list))
        return encoded_bitarray + symbols_bitarray


class BWTBlockDecoder(DataDecoder):
    """inverts the BWTBlockEncoder output, one block at a time"""

    def __init__(self, verify_inverse: bool = False):
        """
        Args:
            verify_inverse (bool, optional): check every decoded block transforms back to the encoded one.
            Defaults to False.
        """
        self.bwt_transform = BurrowsWheelerTransform(verify_inverse=verify_inverse)

    def decode_block(self, encoded_bitarray: BitArray):
        header_len = 2 * NUM_SIZE_BITS
        if len(encoded_bitarray) < header_len:
            raise CorruptEncodingError(f"encoded block of {len(encoded_bitarray)} bits is shorter than its header")

        size = bitarray_to_uint(encoded_bitarray[:NUM_SIZE_BITS])
        index = bitarray_to_uint(encoded_bitarray[NUM_SIZE_BITS:header_len])

        num_bits_consumed = header_len + size * NUM_SYMBOL_BITS
        if len(encoded_bitarray) < num_bits_consumed:
            raise CorruptEncodingError(f"encoded block truncated: expected {size} symbols")

        bwt_list = list(encoded_bitarray[header_len:num_bits_consumed].tobytes())
        log("inverse bwt of block of size", size, "index", index)
        try:
            decoded_block = self.bwt_transform.inverse(DataBlock(bwt_list), index)
        except InvalidInputError as e:
            # the header itself is inconsistent (empty block, or index out of range)
            raise CorruptEncodingError(f"invalid block header: {e}") from e

        return decoded_block, num_bits_consumed


def main(argv=None):
    parser = argparse.ArgumentParser(description="Burrows-Wheeler transform (and inverse) of a file, block by block")
    parser.add_argument("-d", "--decompress", help="inverse transform", action="store_true")
    parser.add_argument("-i", "--input", help="input file", required=True, type=str)
    parser.add_argument("-o", "--output", help="output file", required=True, type=str)
    parser.add_argument(
        "-b", "--block_size", help="block size (in bytes) used while encoding", type=int, default=DEFAULT_BLOCK_SIZE
    )
    parser.add_argument(
        "--verify", help="check every decoded block transforms back to the encoded one", action="store_true"
    )
    parser.add_argument("-v", "--verbose", help="debug logging", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    if args.block_size <= 0 or args.block_size >= MAX_BLOCK_SIZE:
        parser.error(f"block_size should be in [1, {MAX_BLOCK_SIZE - 1}]")

    try:
        if args.decompress:
            num_blocks = BWTBlockDecoder(verify_inverse=args.verify).decode_file(args.input, args.output)
        else:
            num_blocks = BWTBlockEncoder().encode_file(args.input, args.output, block_size=args.block_size)
    except BWTError:
        logging.exception("failed to process %s", args.input)
        raise

    logging.info("%s: %d blocks written to %s", args.input, num_blocks, args.output)


#######################################


def test_bwt_block_coder_encode_decode():
    encoder = BWTBlockEncoder()
    decoder = BWTBlockDecoder(verify_inverse=True)

    data_block = DataBlock(list(b"BANANA"))
    is_lossless, encode_len, encoded_bitarray = try_lossless_compression(
        data_block, encoder, decoder, add_extra_bits_to_encoder_output=True, seed=0
    )
    assert is_lossless
    assert encode_len == 64 + 6 * 8
    assert encoded_bitarray[64:].tobytes() == b"NNBAAA"
    assert bitarray_to_uint(encoded_bitarray[32:64]) == 3

    for seed, alphabet in enumerate([[0], [10, 20], list(range(256))]):
        data_block = get_random_data_block(alphabet, 1000, seed=seed)
        is_lossless, _, _ = try_lossless_compression(
            data_block, encoder, decoder, add_extra_bits_to_encoder_output=True, seed=seed
        )
        assert is_lossless


def test_bwt_block_decoder_corrupt_input():
    decoder = BWTBlockDecoder()
    encoded_bitarray = BWTBlockEncoder().encode_block(DataBlock(list(b"hello world")))

    # truncated payload
    with pytest.raises(CorruptEncodingError):
        decoder.decode_block(encoded_bitarray[:-8])
    with pytest.raises(CorruptEncodingError):
        decoder.decode_block(encoded_bitarray[:40])

    # index out of range in the header
    bad_index_bitarray = (
        encoded_bitarray[:32] + uint_to_bitarray(11, bit_width=32) + encoded_bitarray[64:]
    )
    with pytest.raises(CorruptEncodingError):
        decoder.decode_block(bad_index_bitarray)

    # the encoder only takes bytes
    with pytest.raises(InvalidInputError):
        BWTBlockEncoder().encode_block(DataBlock(list("hello")))


def test_bwt_block_coder_file():
    """encode/decode a multi-block file, including a last block shorter than the block size"""
    encoder = BWTBlockEncoder()
    decoder = BWTBlockDecoder()

    with tempfile.TemporaryDirectory() as tmpdirname:
        input_file_path = os.path.join(tmpdirname, "inp_file.bin")
        create_random_binary_file(input_file_path, file_size=2500, alphabet=[44, 45, 46, 255], seed=0)
        assert try_file_lossless_compression(input_file_path, encoder, decoder, encode_block_size=1000)

        # same thing through in-memory streams
        encoded_file_path = os.path.join(tmpdirname, "encoded.bin")
        input_list = list(b"mississippi river " * 20)
        with ListDataStream(input_list) as ds, EncodedBlockWriter(encoded_file_path) as writer:
            assert encoder.encode(ds, block_size=64, encode_writer=writer) == 6

        output_list = []
        with EncodedBlockReader(encoded_file_path) as reader, ListDataStream(output_list) as ds:
            assert decoder.decode(reader, ds) == 6
        assert output_list == input_list


def test_bwt_block_coder_cli():
    with tempfile.TemporaryDirectory() as tmpdirname:
        input_file_path = os.path.join(tmpdirname, "inp_file.txt")
        encoded_file_path = os.path.join(tmpdirname, "inp_file.bwt")
        decoded_file_path = os.path.join(tmpdirname, "inp_file_decoded.txt")

        data = b"abracadabra " * 50
        with open(input_file_path, "wb") as f:
            f.write(data)

        main(["-i", input_file_path, "-o", encoded_file_path, "-b", "256"])
        main(["-d", "--verify", "-i", encoded_file_path, "-o", decoded_file_path])

        with open(decoded_file_path, "rb") as f:
            assert f.read() == data


def _write_encoded_file(tmpdirname, data: bytes):
    """encodes data as a single block file, returns the path of the encoded file"""
    input_file_path = os.path.join(tmpdirname, "inp_file.txt")
    encoded_file_path = os.path.join(tmpdirname, "inp_file.bwt")
    with open(input_file_path, "wb") as f:
        f.write(data)
    main(["-i", input_file_path, "-o", encoded_file_path])
    return encoded_file_path


def test_bwt_block_decoder_corrupt_file():
    """damaged encoded files raise CorruptEncodingError rather than decoding garbage"""
    decoder = BWTBlockDecoder()
    with tempfile.TemporaryDirectory() as tmpdirname:
        encoded_file_path = _write_encoded_file(tmpdirname, b"abracadabra " * 50)
        decoded_file_path = os.path.join(tmpdirname, "decoded.txt")
        with open(encoded_file_path, "rb") as f:
            encoded_bytes = f.read()

        # file cut short
        with open(encoded_file_path, "wb") as f:
            f.write(encoded_bytes[:-5])
        with pytest.raises(CorruptEncodingError):
            decoder.decode_file(encoded_file_path, decoded_file_path)

        # frame one byte larger than the block it holds
        payload_size = int.from_bytes(encoded_bytes[:4], byteorder="big")
        with open(encoded_file_path, "wb") as f:
            f.write((payload_size + 1).to_bytes(4, byteorder="big") + encoded_bytes[4:] + b"\x00")
        with pytest.raises(CorruptEncodingError):
            decoder.decode_file(encoded_file_path, decoded_file_path)


def test_bwt_block_coder_cli_errors(caplog):
    with tempfile.TemporaryDirectory() as tmpdirname:
        encoded_file_path = _write_encoded_file(tmpdirname, b"mississippi")
        decoded_file_path = os.path.join(tmpdirname, "decoded.txt")

        # invalid block size is rejected by the argument parser
        with pytest.raises(SystemExit):
            main(["-i", encoded_file_path, "-o", decoded_file_path, "-b", "0"])

        # corrupt input is logged, then re-raised
        with open(encoded_file_path, "rb") as f:
            encoded_bytes = f.read()
        with open(encoded_file_path, "wb") as f:
            f.write(encoded_bytes[:-3])

        with caplog.at_level(logging.ERROR):
            with pytest.raises(CorruptEncodingError):
                main(["-d", "-i", encoded_file_path, "-o", decoded_file_path])
        assert f"failed to process {encoded_file_path}" in caplog.text


if __name__ == "__main__":
    main()
