"""Unbuffered reading of a file in caller-sized chunks."""

import io
import os


class FileDataSource:
    """A read-only file that hands out its bytes in chunks of a requested size.

    A source that has no file open reports a size of 0.
    """

    def __init__(self, file_name=None):
        self._file = None
        if file_name is not None:
            self.open(file_name)

    @property
    def is_open(self):
        return self._file is not None

    @property
    def minimum_read_size(self):
        """Smallest request that :meth:`read` will serve."""
        return 1

    def open(self, file_name):
        """Open ``file_name`` for reading, closing any previously open file."""
        try:
            new_file = io.FileIO(file_name, "r")
        except OSError as err:
            raise OSError(
                err.errno,
                f'Could not open file "{file_name}" for reading: {err.strerror}',
                str(file_name),
            ) from err
        self.close()
        self._file = new_file

    def close(self):
        """Close the open file, if any."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def _require_open(self):
        if self._file is None:
            raise ValueError("no file is open for reading")
        return self._file

    def rewind(self):
        """Move back to the start of the file."""
        self._require_open().seek(0)

    def size(self):
        """Size of the open file in bytes, or 0 when no file is open."""
        if self._file is None:
            return 0
        return os.fstat(self._file.fileno()).st_size

    def read(self, to_read):
        """Read at most ``to_read`` bytes; an empty result means end of file."""
        if to_read < 0:
            raise ValueError("the number of bytes to read must not be negative")
        data = self._require_open().read(to_read)
        return data if data is not None else b""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False