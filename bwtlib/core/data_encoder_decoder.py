"""defines DataEncoder and DataDecoder classes

DataEncoder and DataDecoder are the base classes for the block coders.
- subclasses only implement encode_block / decode_block, which work on a single block of data
- chopping the input into blocks, and writing/reading the framed encoded blocks, is handled here
"""

import abc
from bwtlib.core.data_block import DataBlock
from bwtlib.core.data_stream import DataStream, Uint8FileDataStream
from bwtlib.core.encoded_stream import EncodedBlockReader, EncodedBlockWriter
from bwtlib.core.errors import CorruptEncodingError
from bwtlib.utils.bitarray_utils import BitArray
from bwtlib.utils.log_utils import log

# number of symbols per block when encoding files
DEFAULT_BLOCK_SIZE = 100_000


class DataEncoder(abc.ABC):
    """base abstract class for implementing any data encoder"""

    @abc.abstractmethod
    def encode_block(self, data_block: DataBlock) -> BitArray:
        """encode a given block of data to a bitarray"""
        raise NotImplementedError

    def encode(self, data_stream: DataStream, block_size: int, encode_writer: EncodedBlockWriter):
        """chops data_stream into blocks of block_size, encodes each and writes it using encode_writer

        Returns:
            int: number of blocks encoded
        """
        num_blocks = 0
        while True:
            data_block = data_stream.get_block(block_size)
            if data_block is None:
                break

            output = self.encode_block(data_block)
            assert isinstance(output, BitArray)

            encode_writer.write_block(output)
            num_blocks += 1
        log("encoded", num_blocks, "blocks")
        return num_blocks

    def encode_file(self, input_file_path: str, encoded_file_path: str, block_size: int = DEFAULT_BLOCK_SIZE):
        """encode the bytes of input_file_path and write the encoded blocks to encoded_file_path"""
        with Uint8FileDataStream(input_file_path, "rb") as fds:
            with EncodedBlockWriter(encoded_file_path) as writer:
                return self.encode(fds, block_size=block_size, encode_writer=writer)


class DataDecoder(abc.ABC):
    """abstract class used to define a decoder"""

    @abc.abstractmethod
    def decode_block(self, bitarray: BitArray):
        """decode one encoded bitarray

        Returns:
            decoded_block (DataBlock), num_bits_consumed (int)
        """
        raise NotImplementedError

    def decode(self, encode_reader: EncodedBlockReader, output_stream: DataStream):
        """decode every encoded block read by encode_reader and write the data to output_stream

        Returns:
            int: number of blocks decoded
        """
        num_blocks = 0
        while True:
            encoded_block = encode_reader.get_block()
            if encoded_block is None:
                break

            output_block, num_bits_consumed = self.decode_block(encoded_block)
            if num_bits_consumed != len(encoded_block):
                raise CorruptEncodingError(
                    f"block decoded from {num_bits_consumed} bits, but the frame holds {len(encoded_block)} bits"
                )

            output_stream.write_block(output_block)
            num_blocks += 1
        log("decoded", num_blocks, "blocks")
        return num_blocks

    def decode_file(self, encoded_file_path: str, output_file_path: str):
        """decode encoded_file_path and write the decoded bytes to output_file_path"""
        with EncodedBlockReader(encoded_file_path) as reader:
            with Uint8FileDataStream(output_file_path, "wb") as fds:
                return self.decode(reader, fds)
