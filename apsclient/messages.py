"""Wire structures exchanged with the receiving station."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field

PROTOCOL_VERSION = 0xAC01
HEADER_SIZE = 16
TARGET_DESIGNATION_SIZE = 26

_HEADER_FORMAT = "HBBdI"
_TARGET_FORMAT = "<bbhiddh"
_COORDINATE_FORMAT = "<hh"


class ConnectionStatus(enum.IntEnum):
    """State of the pair of station connections."""

    UNCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    DISCONNECTED = 3


class MessageType(enum.IntEnum):
    """Message type codes carried in the packet header."""

    TARGET_DESIGNATION = 0x01
    STOP_MESSAGES = 0x02
    REQUEST_STATE_OF_DATA = 0x04
    EXECUTED_THE_COMMAND = 0x80
    RECEIVE_STATE = 0x81
    DATA_CHANNEL_STATE = 0x84


class ByteReader:
    """Sequential reader of packed binary fields."""

    def __init__(self, data: bytes, byteorder: str = "<") -> None:
        self._data = bytes(data)
        self._offset = 0
        self._byteorder = byteorder

    def read(self, fmt: str) -> tuple:
        """Read the fields described by a struct format and return them as a tuple."""
        layout = struct.Struct(self._byteorder + fmt)
        if layout.size > self.remaining():
            raise ValueError(
                f"need {layout.size} bytes, only {self.remaining()} left"
            )
        values = layout.unpack_from(self._data, self._offset)
        self._offset += layout.size
        return values

    def remaining(self) -> int:
        """Number of bytes not read yet."""
        return len(self._data) - self._offset


@dataclass(frozen=True)
class ExecutedTheCommand:
    """Acknowledgement of a command by the station."""

    date: float
    id: int
    result: int

    @classmethod
    def read(cls, reader: ByteReader) -> "ExecutedTheCommand":
        return cls(*reader.read("dBB"))


@dataclass(frozen=True)
class ReceivingMessage:
    """State of one receiving channel."""

    center_frequency: int
    spacecraft_number: int
    coordinates: tuple[int, int]
    channel_number: int
    direction_of_polarization: int
    level_of_signal: float
    receiving_sector_number: int
    state: int
    azimuth_start_sector: int
    azimuth_end_sector: int

    @classmethod
    def read(cls, reader: ByteReader) -> "ReceivingMessage":
        # The signal level travels as an 8-byte double.
        (freq, craft, az, el, channel, pol, level,
         sector, state, start, end) = reader.read("IHhhBbdBbhh")
        return cls(freq, craft, (az, el), channel, pol, level,
                   sector, state, start, end)


@dataclass(frozen=True)
class ReceiveState:
    """Receiving state of all channels."""

    channels: tuple[ReceivingMessage, ...] = ()

    @property
    def count(self) -> int:
        return len(self.channels)

    @classmethod
    def read(cls, reader: ByteReader) -> "ReceiveState":
        (count,) = reader.read("B")
        return cls(tuple(ReceivingMessage.read(reader) for _ in range(count)))


@dataclass(frozen=True)
class DataChannelSession:
    """One planned tracking session of a data channel."""

    channel_number: int
    sector_number: int
    physical_channel_number: int
    polarization_direction: int
    spacecraft_number: int
    center_frequency: int
    start_time: float
    end_time: float
    target_coordinates: tuple[int, int]

    @classmethod
    def read(cls, reader: ByteReader) -> "DataChannelSession":
        (channel, sector, physical, pol, craft, freq,
         start, end, az, el) = reader.read("BBBBHIddhh")
        return cls(channel, sector, physical, pol, craft, freq,
                   start, end, (az, el))


@dataclass(frozen=True)
class DataChannelSegment:
    """A segment of a data channel plan with its targets."""

    sector_number: int
    physical_channel_number: int
    polarization_direction: int
    spacecraft_number: int
    center_frequency: int
    start_time: float
    end_time: float
    targets: tuple[DataChannelSession, ...] = ()

    @property
    def target_count(self) -> int:
        return len(self.targets)

    @classmethod
    def read(cls, reader: ByteReader) -> "DataChannelSegment":
        (sector, physical, pol, craft, freq,
         start, end, count) = reader.read("BBBHIddH")
        targets = tuple(DataChannelSession.read(reader) for _ in range(count))
        return cls(sector, physical, pol, craft, freq, start, end, targets)


@dataclass(frozen=True)
class DataChannelInfo:
    """A data channel and its segments."""

    channel_number: int
    segments: tuple[DataChannelSegment, ...] = ()

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    @classmethod
    def read(cls, reader: ByteReader) -> "DataChannelInfo":
        channel, count = reader.read("BB")
        segments = tuple(DataChannelSegment.read(reader) for _ in range(count))
        return cls(channel, segments)


@dataclass(frozen=True)
class DataChannelMessage:
    """State of all active data channels."""

    channels: tuple[DataChannelInfo, ...] = ()

    @property
    def active_channels_count(self) -> int:
        return len(self.channels)

    @classmethod
    def read(cls, reader: ByteReader) -> "DataChannelMessage":
        (count,) = reader.read("B")
        return cls(tuple(DataChannelInfo.read(reader) for _ in range(count)))


@dataclass(frozen=True)
class TargetDesignations:
    """A target designation command with its coordinate track."""

    channel_number: int
    direction_of_polarization: int
    spacecraft_number: int
    center_frequency: int
    plan_start_time: float
    plan_end_time: float
    coordinates: tuple[tuple[int, int], ...] = ()

    @property
    def count(self) -> int:
        return len(self.coordinates)

    def encode(self) -> bytes:
        """Serialise the command body in little-endian order."""
        try:
            body = struct.pack(
                _TARGET_FORMAT,
                self.channel_number,
                self.direction_of_polarization,
                self.spacecraft_number,
                self.center_frequency,
                self.plan_start_time,
                self.plan_end_time,
                self.count,
            )
            points = b"".join(
                struct.pack(_COORDINATE_FORMAT, azimuth, elevation)
                for azimuth, elevation in self.coordinates
            )
        except struct.error as exc:
            raise ValueError(f"target designation field out of range: {exc}") from exc
        return body + points


@dataclass
class Header:
    """Packet header preceding every message body."""

    msg_type: int = 0
    time_created: float = 0.0
    count_bytes: int = 0
    version: int = PROTOCOL_VERSION
    zero: int = 0

    def encode(self) -> bytes:
        """Serialise the header for sending, in big-endian order."""
        try:
            return struct.pack(
                ">" + _HEADER_FORMAT,
                self.version,
                self.msg_type,
                self.zero,
                self.time_created,
                self.count_bytes,
            )
        except struct.error as exc:
            raise ValueError(f"header field out of range: {exc}") from exc

    @classmethod
    def decode(cls, data: bytes) -> "Header":
        """Parse a received header, which arrives in little-endian order."""
        version, msg_type, zero, created, count = ByteReader(data).read(_HEADER_FORMAT)
        return cls(msg_type=msg_type, time_created=created, count_bytes=count,
                   version=version, zero=zero)


@dataclass
class Packet:
    """A received header, its body and a sequence id."""

    header: Header = field(default_factory=Header)
    data: bytes = b""
    id: int = 0