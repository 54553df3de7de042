"""Output sinks for rendered text.

Every sink offers the same capabilities (write, write_formatted, seek, tell,
flush, length); callers pick the backing they need:

  CountingSink  – discards data, only counts bytes
  FileSink      – owns a file opened for writing
  BufferSink    – fixed-capacity in-memory buffer
  StreamSink    – wraps an existing binary stream, e.g. sys.stdout.buffer
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol

from pdf_errors import SinkError


class TextSink(Protocol):
    @property
    def length(self) -> int: ...

    def write(self, data: bytes) -> None: ...

    def write_formatted(self, fmt: str, *args: object) -> None: ...

    def seek(self, offset: int) -> None: ...

    def tell(self) -> int: ...

    def flush(self) -> None: ...


def _format(fmt: str, args: tuple[object, ...]) -> bytes:
    return (fmt % args if args else fmt).encode("utf-8")


def _check_seek(offset: int, length: int) -> None:
    if offset < 0 or offset > length:
        raise SinkError(f"cannot seek to {offset}: only {length} bytes written")


class CountingSink:
    def __init__(self) -> None:
        self._position = 0
        self._length = 0

    @property
    def length(self) -> int:
        return self._length

    def write(self, data: bytes) -> None:
        self._position += len(data)
        self._length = max(self._length, self._position)

    def write_formatted(self, fmt: str, *args: object) -> None:
        self.write(_format(fmt, args))

    def seek(self, offset: int) -> None:
        _check_seek(offset, self._length)
        self._position = offset

    def tell(self) -> int:
        return self._position

    def flush(self) -> None:
        pass


class FileSink:
    """Write to a file at *path*, truncating it. Use as a context manager."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._fh: BinaryIO = open(self.path, "wb")
        self._length = 0

    def __enter__(self) -> FileSink:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def length(self) -> int:
        return self._length

    def write(self, data: bytes) -> None:
        self._fh.write(data)
        self._length = max(self._length, self._fh.tell())

    def write_formatted(self, fmt: str, *args: object) -> None:
        self.write(_format(fmt, args))

    def seek(self, offset: int) -> None:
        _check_seek(offset, self._length)
        self._fh.seek(offset)

    def tell(self) -> int:
        return self._fh.tell()

    def flush(self) -> None:
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class BufferSink:
    """Write into a preallocated buffer of *capacity* bytes."""

    def __init__(self, capacity: int) -> None:
        self._buffer = bytearray(capacity)
        self._position = 0
        self._length = 0

    @property
    def length(self) -> int:
        return self._length

    def getvalue(self) -> bytes:
        return bytes(self._buffer[: self._length])

    def write(self, data: bytes) -> None:
        end = self._position + len(data)
        if end > len(self._buffer):
            raise SinkError(
                f"buffer overflow: {end} bytes needed, capacity is {len(self._buffer)}"
            )
        self._buffer[self._position : end] = data
        self._position = end
        self._length = max(self._length, end)

    def write_formatted(self, fmt: str, *args: object) -> None:
        self.write(_format(fmt, args))

    def seek(self, offset: int) -> None:
        _check_seek(offset, self._length)
        self._position = offset

    def tell(self) -> int:
        return self._position

    def flush(self) -> None:
        pass


class StreamSink:
    """Write to a caller-owned binary stream; the stream is never closed here."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self._start = stream.tell() if stream.seekable() else 0
        self._position = 0
        self._length = 0

    @property
    def length(self) -> int:
        return self._length

    def write(self, data: bytes) -> None:
        self.stream.write(data)
        self._position += len(data)
        self._length = max(self._length, self._position)

    def write_formatted(self, fmt: str, *args: object) -> None:
        self.write(_format(fmt, args))

    def seek(self, offset: int) -> None:
        _check_seek(offset, self._length)
        if not self.stream.seekable():
            raise SinkError("underlying stream is not seekable")
        self.stream.seek(self._start + offset)
        self._position = offset

    def tell(self) -> int:
        return self._position

    def flush(self) -> None:
        self.stream.flush()
