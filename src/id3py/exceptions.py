"""Exceptions raised by id3py.

- InvalidDatasetError (subclass of ValueError): training data or feature
  labels are malformed.  Raised before any tree building starts.
- TreeStorageError (subclass of OSError): a storage sink could not write or
  read a serialized tree.
"""

from __future__ import annotations


class InvalidDatasetError(ValueError):
    """Raised when a dataset or its feature labels cannot be used for training.

    Covers empty datasets, examples of inconsistent length, feature label lists
    that do not match the attribute columns, and values other than finite
    ints, floats or strings.
    """


class TreeStorageError(OSError):
    """Raised when a serialized tree cannot be written to or read from a sink.

    Attributes
    ----------
    location : str
        Destination or source handed to the sink.
    """

    def __init__(self, message: str, *, location: str) -> None:
        super().__init__(message)
        self.location = location
