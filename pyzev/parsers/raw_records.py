"""
Fixed-size on-disk records of an event file.

Every record is big-endian with fixed-width, zero-padded ASCII name fields.
Each class mirrors one table entry and knows how to read itself from and
write itself to a seekable binary stream positioned at the record start.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import IO, ClassVar

from pyzev.misc.validation import InvalidFileError

MAGIC = 0x775A        # "wZ"
EV_SENTINEL = 0x4576  # "Ev"
NO_DEPENDENCY = -1

# Byte offset of the wait pointer inside a step-part-1 record (after the long name)
STEP1_WAIT_FOR_OFFSET = 0x10
WAIT_FOR_FORMAT = struct.Struct(">h")


def read_exact(stream: IO[bytes], size: int, what: str) -> bytes:
    """Read exactly `size` bytes or fail with InvalidFileError."""
    data = stream.read(size)
    if len(data) != size:
        raise InvalidFileError(f"unexpected end of data reading {what}: wanted {size} bytes, got {len(data)}")
    return data


def decode_name(raw: bytes) -> str:
    """
    Decode a fixed-width name field.

    The name ends at the first zero byte; a field without any zero byte is
    taken whole.
    """
    end = raw.find(b"\x00")
    if end != -1:
        raw = raw[:end]
    try:
        return raw.decode("ascii")
    except UnicodeDecodeError as exc:
        raise InvalidFileError(f"invalid string {raw!r}") from exc


def encode_name(name: str, width: int) -> bytes:
    """Encode a name into a zero-padded field; names never get truncated."""
    data = name.encode("ascii")
    if len(data) > width:
        raise ValueError(f"string too long: {name!r} does not fit in {width} bytes")
    return data.ljust(width, b"\x00")


@dataclass
class RawHeader:
    magic: int
    event_count: int
    actor_count: int
    steps_count: int
    steps2_count: int
    data_def_count: int
    always_ev: int
    int_count: int
    float_count: int
    string_count: int

    FORMAT: ClassVar[struct.Struct] = struct.Struct(">10H")
    SIZE: ClassVar[int] = 0x14

    @classmethod
    def read(cls, stream: IO[bytes]) -> "RawHeader":
        return cls(*cls.FORMAT.unpack(read_exact(stream, cls.SIZE, "header")))

    def write(self, stream: IO[bytes]):
        stream.write(self.FORMAT.pack(
            self.magic, self.event_count, self.actor_count, self.steps_count,
            self.steps2_count, self.data_def_count, self.always_ev,
            self.int_count, self.float_count, self.string_count,
        ))


@dataclass
class RawEvent:
    name: str
    pad1: int
    flag: int
    pad2: int
    actor_index: int
    actor_count: int

    FORMAT: ClassVar[struct.Struct] = struct.Struct(">32sBBHHH")
    SIZE: ClassVar[int] = 0x28
    NAME_SIZE: ClassVar[int] = 0x20

    @classmethod
    def read(cls, stream: IO[bytes]) -> "RawEvent":
        name, *rest = cls.FORMAT.unpack(read_exact(stream, cls.SIZE, "event record"))
        return cls(decode_name(name), *rest)

    def write(self, stream: IO[bytes]):
        stream.write(self.FORMAT.pack(
            encode_name(self.name, self.NAME_SIZE),
            self.pad1, self.flag, self.pad2, self.actor_index, self.actor_count,
        ))


@dataclass
class RawActor:
    name: str
    flag1: int
    flag2: int
    step_index: int
    step_count: int

    FORMAT: ClassVar[struct.Struct] = struct.Struct(">32sHHHH")
    SIZE: ClassVar[int] = 0x28
    NAME_SIZE: ClassVar[int] = 0x20

    @classmethod
    def read(cls, stream: IO[bytes]) -> "RawActor":
        name, *rest = cls.FORMAT.unpack(read_exact(stream, cls.SIZE, "actor record"))
        return cls(decode_name(name), *rest)

    def write(self, stream: IO[bytes]):
        stream.write(self.FORMAT.pack(
            encode_name(self.name, self.NAME_SIZE),
            self.flag1, self.flag2, self.step_index, self.step_count,
        ))


@dataclass
class RawStep1:
    """First half of a step: long name, wait pointer and owning actor."""
    long_name: str
    wait_for: int
    actor_index: int
    flag: int
    pad1: int
    this_index: int
    pad2: int

    FORMAT: ClassVar[struct.Struct] = struct.Struct(">16shHHHHH")
    SIZE: ClassVar[int] = 0x1C
    NAME_SIZE: ClassVar[int] = 0x10

    @classmethod
    def read(cls, stream: IO[bytes]) -> "RawStep1":
        name, *rest = cls.FORMAT.unpack(read_exact(stream, cls.SIZE, "step record"))
        return cls(decode_name(name), *rest)

    def write(self, stream: IO[bytes]):
        stream.write(self.FORMAT.pack(
            encode_name(self.long_name, self.NAME_SIZE),
            self.wait_for, self.actor_index, self.flag, self.pad1, self.this_index, self.pad2,
        ))


@dataclass
class RawStep2:
    """Second half of a step: short name and its data definition range."""
    name: str
    flag: int
    this_index: int
    data_def_index: int
    data_def_count: int

    FORMAT: ClassVar[struct.Struct] = struct.Struct(">4sHHHH")
    SIZE: ClassVar[int] = 0xC
    NAME_SIZE: ClassVar[int] = 4

    @classmethod
    def read(cls, stream: IO[bytes]) -> "RawStep2":
        name, *rest = cls.FORMAT.unpack(read_exact(stream, cls.SIZE, "step2 record"))
        return cls(decode_name(name), *rest)

    def write(self, stream: IO[bytes]):
        stream.write(self.FORMAT.pack(
            encode_name(self.name, self.NAME_SIZE),
            self.flag, self.this_index, self.data_def_index, self.data_def_count,
        ))


@dataclass
class RawDataDef:
    name: str
    flag: int
    data_type: int
    data_index: int
    data_len: int

    FORMAT: ClassVar[struct.Struct] = struct.Struct(">4sHHHH")
    SIZE: ClassVar[int] = 0xC
    NAME_SIZE: ClassVar[int] = 4

    @classmethod
    def read(cls, stream: IO[bytes]) -> "RawDataDef":
        name, *rest = cls.FORMAT.unpack(read_exact(stream, cls.SIZE, "data definition"))
        return cls(decode_name(name), *rest)

    def write(self, stream: IO[bytes]):
        stream.write(self.FORMAT.pack(
            encode_name(self.name, self.NAME_SIZE),
            self.flag, self.data_type, self.data_index, self.data_len,
        ))
