"""
Base interface for column conversion strategies.

A strategy holds all decisions needed to copy data from a transit buffer into
an Arrow array. Callers first ask for the buffer description, bind a buffer
of that shape to the data source, and pass a view of the filled buffer back to
`fill_arrow_array`. The pairing of both operations is the whole contract with
the buffer-filling side.
"""
from abc import ABC, abstractmethod

import pyarrow as pa
from dbarrow.buffers import BufferDescription, ColumnView
from dbarrow.exceptions import BufferMismatchError


class ColumnStrategy(ABC):
    """Base class for column conversion strategies.
    """

    @abstractmethod
    def buffer_description(self) -> BufferDescription:
        """Describe the buffer which is bound to the data source.
        """

    @abstractmethod
    def _fill(self, column_view: ColumnView) -> pa.Array:
        """Build the Arrow array from a view already checked against the description.
        """

    def fill_arrow_array(self, column_view: ColumnView) -> pa.Array:
        """Create an Arrow array from a buffer described by `buffer_description`.

        Raises
            BufferMismatchError: the view was filled for another description
        """
        expected = self.buffer_description()
        if column_view.description != expected:
            raise BufferMismatchError(
                f'{type(self).__name__} expects a buffer described by {expected}, '
                f'got {column_view.description}')
        return self._fill(column_view)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.buffer_description()})'
