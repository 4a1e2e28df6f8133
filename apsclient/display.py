"""Plain-text presentation of connections and station messages."""

from __future__ import annotations

from apsclient.messages import (
    DataChannelMessage,
    DataChannelSegment,
    DataChannelSession,
    ReceivingMessage,
)
from apsclient.store import ConnectionInfo

SPACECRAFT_TITLE = "Номер космического аппарата: "

RECEIVING_LABELS = (
    "Центральная частота в кГц",
    "Номер физического канала",
    "Состояние инфраструктуры АС",
    "Направление поляризации",
    "Номер сектора приема",
    "Среднеквадратический уровень сигнала приема",
)

SECTOR_LABELS = (
    "Азимут начала сектора приема",
    "Азимут конца сектора приема",
)

BEAM_LABELS = (
    "Текущий азимут луча",
    "Текущий угол места луча",
)

AC_PREFIX = "П1: "
P2_PREFIX = "П2: "

ACTIVE_CHANNELS_TITLE = "Активных каналов: "

_INDENT = "    "


def _field(label: str, value: object) -> str:
    return f"{label}: {value}"


def format_receiving_message(message: ReceivingMessage) -> str:
    """Describe the state of one receiving channel, one field per line."""
    values = (
        message.center_frequency,
        message.channel_number,
        message.state,
        message.direction_of_polarization,
        message.receiving_sector_number,
        message.level_of_signal,
    )
    lines = [SPACECRAFT_TITLE + str(message.spacecraft_number)]
    lines.extend(_field(label, value) for label, value in zip(RECEIVING_LABELS, values))
    lines.extend(
        _field(label, value)
        for label, value in zip(
            SECTOR_LABELS,
            (message.azimuth_start_sector, message.azimuth_end_sector),
        )
    )
    lines.extend(
        _field(label, value) for label, value in zip(BEAM_LABELS, message.coordinates)
    )
    return "\n".join(lines)


def format_connection(info: ConnectionInfo) -> str:
    """Describe a saved connection: its name and both station addresses."""
    return "\n".join(
        (
            info.name_connection,
            AC_PREFIX + info.tcp_ac,
            P2_PREFIX + info.tcp_p2,
        )
    )


def _session_line(session: DataChannelSession) -> str:
    azimuth, elevation = session.target_coordinates
    return (
        f"канал {session.channel_number}, сектор {session.sector_number}, "
        f"физ. канал {session.physical_channel_number}, "
        f"поляризация {session.polarization_direction}, "
        f"КА {session.spacecraft_number}, частота {session.center_frequency}, "
        f"начало {session.start_time}, конец {session.end_time}, "
        f"азимут {azimuth}, угол места {elevation}"
    )


def _segment_lines(segment: DataChannelSegment) -> list[str]:
    lines = [
        f"Сегмент: сектор {segment.sector_number}, "
        f"физ. канал {segment.physical_channel_number}, "
        f"поляризация {segment.polarization_direction}, "
        f"КА {segment.spacecraft_number}, частота {segment.center_frequency}, "
        f"начало {segment.start_time}, конец {segment.end_time}, "
        f"целей {segment.target_count}"
    ]
    lines.extend(_INDENT + _session_line(target) for target in segment.targets)
    return lines


def format_data_channel_message(message: DataChannelMessage) -> str:
    """Describe the state of the data channels: count, then each channel's plan."""
    lines = [ACTIVE_CHANNELS_TITLE + str(message.active_channels_count)]
    for channel in message.channels:
        lines.append(
            f"Канал {channel.channel_number}: сегментов {channel.segment_count}"
        )
        for segment in channel.segments:
            lines.extend(_INDENT + line for line in _segment_lines(segment))
    return "\n".join(lines)