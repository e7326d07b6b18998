"""encoded stream writers and readers

The block coders encode every data_block into a bitarray of variable size. To find the bitarray of
each block again while decoding, each one is stored as a frame:

    [header: payload size in bytes (32 bits)] [num_pad (3 bits)] [padding (num_pad bits)] [encoded bitarray]

The padding makes each frame byte aligned. EncodedBlockWriter and EncodedBlockReader add/strip the frame,
so the coders only deal with the encoded bitarrays.
"""

import os
import tempfile

import pytest

from bwtlib.core.errors import CorruptEncodingError
from bwtlib.utils.bitarray_utils import BitArray, uint_to_bitarray, bitarray_to_uint

NUM_PAD_BITS = 3
NUM_HEADER_BYTES = 4
NUM_HEADER_BITS = NUM_HEADER_BYTES * 8
MAX_PAYLOAD_SIZE = 1 << NUM_HEADER_BITS


def add_byte_padding(payload_bitarray: BitArray) -> BitArray:
    """prepend (num_pad + padding) so that the result is a whole number of bytes"""
    assert isinstance(payload_bitarray, BitArray)
    num_pad = (8 - (len(payload_bitarray) + NUM_PAD_BITS) % 8) % 8
    return uint_to_bitarray(num_pad, bit_width=NUM_PAD_BITS) + BitArray("0" * num_pad) + payload_bitarray


def remove_byte_padding(padded_bitarray: BitArray) -> BitArray:
    assert isinstance(padded_bitarray, BitArray)
    num_pad = bitarray_to_uint(padded_bitarray[:NUM_PAD_BITS])
    return padded_bitarray[NUM_PAD_BITS + num_pad :]


def add_header(padded_bitarray: BitArray) -> BitArray:
    """prepend the size (in bytes) of the byte aligned padded_bitarray"""
    assert len(padded_bitarray) % 8 == 0
    num_bytes = len(padded_bitarray) // 8
    assert num_bytes < MAX_PAYLOAD_SIZE
    return uint_to_bitarray(num_bytes, bit_width=NUM_HEADER_BITS) + padded_bitarray


def get_payload_size(header_bytes: bytes) -> int:
    assert isinstance(header_bytes, bytes) and len(header_bytes) == NUM_HEADER_BYTES
    return int.from_bytes(header_bytes, byteorder="big")


class EncodedBlockWriter:
    """writer to write encoded bitarrays (one frame each) to a binary file"""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def __enter__(self):
        self.file_writer = open(self.file_path, "wb")
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.file_writer.close()

    def write_block(self, encoded_block: BitArray):
        assert isinstance(encoded_block, BitArray)
        frame = add_header(add_byte_padding(encoded_block))
        self.file_writer.write(frame.tobytes())


class EncodedBlockReader:
    """Reader to read encoded bitarrays back from the frames of a binary file"""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def __enter__(self):
        self.file_reader = open(self.file_path, "rb")
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.file_reader.close()

    def get_block(self):
        """returns the next encoded bitarray, None at the end of the file"""
        header_bytes = self.file_reader.read(NUM_HEADER_BYTES)
        if len(header_bytes) == 0:
            return None
        if len(header_bytes) != NUM_HEADER_BYTES:
            raise CorruptEncodingError(f"truncated block header: {len(header_bytes)} bytes")

        payload_size = get_payload_size(header_bytes)
        payload_bytes = self.file_reader.read(payload_size)
        if len(payload_bytes) != payload_size:
            raise CorruptEncodingError(f"truncated block payload: expected {payload_size} bytes, got {len(payload_bytes)}")

        padded_bitarray = BitArray()
        padded_bitarray.frombytes(payload_bytes)
        return remove_byte_padding(padded_bitarray)


###################################


def test_padding():
    for bits_gt in [BitArray("10110"), BitArray("1" * 23), BitArray("0" * 5), BitArray()]:
        padded = add_byte_padding(bits_gt)
        assert len(padded) % 8 == 0
        assert remove_byte_padding(padded) == bits_gt


def test_header():
    padded = add_byte_padding(BitArray("1" * 23))
    data_bytes = add_header(padded).tobytes()
    assert get_payload_size(data_bytes[:NUM_HEADER_BYTES]) == len(padded) // 8


def test_encoded_block_reader_writer():
    """write a few dummy encoded blocks to a file, and check they are read back as is"""
    with tempfile.TemporaryDirectory() as tmpdirname:
        payload_bitarray_blocks = [
            BitArray("101000101010111"),
            BitArray("1" * 24),
            BitArray("0" * 20),
        ]

        temp_file_path = os.path.join(tmpdirname, "encoded.bin")
        with EncodedBlockWriter(temp_file_path) as encode_writer:
            for block in payload_bitarray_blocks:
                encode_writer.write_block(block)

        encoded_blocks = []
        with EncodedBlockReader(temp_file_path) as encode_reader:
            while True:
                block = encode_reader.get_block()
                if block is None:
                    break
                encoded_blocks.append(block)

        assert encoded_blocks == payload_bitarray_blocks


def test_encoded_block_reader_truncated_file():
    """a file cut short in the middle of a header or a payload is reported as corrupt"""
    with tempfile.TemporaryDirectory() as tmpdirname:
        temp_file_path = os.path.join(tmpdirname, "encoded.bin")
        with EncodedBlockWriter(temp_file_path) as encode_writer:
            encode_writer.write_block(BitArray("1" * 40))
            encode_writer.write_block(BitArray("0" * 40))

        with open(temp_file_path, "rb") as f:
            data_bytes = f.read()

        # frame = 4 header bytes + 6 payload bytes; cut inside the 2nd payload, then inside the 2nd header
        for cut_size in [len(data_bytes) - 5, 12]:
            with open(temp_file_path, "wb") as f:
                f.write(data_bytes[:cut_size])

            with EncodedBlockReader(temp_file_path) as encode_reader:
                assert encode_reader.get_block() == BitArray("1" * 40)
                with pytest.raises(CorruptEncodingError):
                    encode_reader.get_block()
