"""exceptions raised by the transforms and the block coders

- InvalidInputError -> the caller passed something the transform is not defined on
  (empty sequence, out-of-range index, symbols which cannot be ordered)
- CorruptEncodingError -> the (encoded, index) pair could not have been produced by a forward transform

Both are deterministic: retrying with the same input gives the same failure.
"""


class BWTError(Exception):
    """base class for all errors raised by bwtlib"""

    pass


class InvalidInputError(BWTError, ValueError):
    pass


class CorruptEncodingError(BWTError):
    pass
