import abc
import tempfile
import os
import typing
from bwtlib.core.data_block import DataBlock

Symbol = typing.Any


class DataStream(abc.ABC):
    """abstract class to represent a Data Stream

    The block coders transform one DataBlock at a time; the DataStream chops an input into blocks
    (get_block) and collects decoded blocks (write_block).
    Subclasses implement get_symbol/write_symbol: ListDataStream (in-memory, mostly for tests)
    and Uint8FileDataStream (bytes of a file).
    """

    @abc.abstractmethod
    def get_symbol(self):
        """returns a symbol from the data stream, returns None if the stream is finished"""
        pass

    @abc.abstractmethod
    def write_symbol(self, s):
        """writes the given symbol to the stream"""
        pass

    def get_block(self, block_size: int) -> DataBlock:
        """returns a block of at most block_size symbols, None if the stream is over"""
        assert block_size > 0
        data_list = []
        for _ in range(block_size):
            s = self.get_symbol()
            if s is None:
                break
            data_list.append(s)

        if not data_list:
            return None
        return DataBlock(data_list)

    def write_block(self, data_block: DataBlock):
        for s in data_block.data_list:
            self.write_symbol(s)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        pass


class ListDataStream(DataStream):
    """
    ListDataStream is a wrapper around a list of symbols, to read/write data block by block.
    """

    def __init__(self, input_list: typing.List):
        assert isinstance(input_list, list)
        self.input_list = input_list
        self.current_ind = 0

    def get_symbol(self) -> Symbol:
        if self.current_ind >= len(self.input_list):
            return None
        s = self.input_list[self.current_ind]
        self.current_ind += 1
        return s

    def write_symbol(self, s: Symbol):
        self.input_list.append(s)


class Uint8FileDataStream(DataStream):
    """reads/writes the bytes of a file as uint8 symbols

    Usage:
        with Uint8FileDataStream(path, "rb") as fds:
            block = fds.get_block(block_size=1000)
    """

    def __init__(self, file_path: str, permissions="rb"):
        assert "b" in permissions, "Uint8FileDataStream works on binary files"
        self.file_path = file_path
        self.permissions = permissions

    def __enter__(self):
        self.file_obj = open(self.file_path, self.permissions)
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.file_obj.close()

    def get_symbol(self):
        """get the next byte from the file as an int in [0, 255], None at end of file"""
        s = self.file_obj.read(1)
        if not s:
            return None
        return s[0]

    def write_symbol(self, s):
        assert 0 <= s <= 255
        self.file_obj.write(bytes([s]))


#################################


def test_list_data_stream():
    """simple testing function to check if list data stream is getting generated correctly"""
    input_list = list(range(10))
    with ListDataStream(input_list) as ds:
        for i in range(3):
            block = ds.get_block(block_size=3)
            assert block.size == 3

        block = ds.get_block(block_size=2)
        assert block.data_list == [9]

        block = ds.get_block(block_size=2)
        assert block is None

    # writing appends to the list
    output_list = []
    with ListDataStream(output_list) as ds:
        ds.write_block(DataBlock([1, 2]))
        ds.write_symbol(3)
    assert output_list == [1, 2, 3]


def test_uint8_file_data_stream():
    with tempfile.TemporaryDirectory() as tmpdirname:
        temp_file_path = os.path.join(tmpdirname, "tmp_file.bin")

        # write data to the file
        with Uint8FileDataStream(temp_file_path, "wb") as fds:
            fds.write_block(DataBlock([5, 2, 255, 0, 43]))
            fds.write_symbol(34)

        # read data from the file
        with Uint8FileDataStream(temp_file_path, "rb") as fds:
            block = fds.get_block(block_size=4)
            assert block.data_list == [5, 2, 255, 0]

            block = fds.get_block(block_size=4)
            assert block.data_list == [43, 34]
            assert fds.get_block(block_size=4) is None
