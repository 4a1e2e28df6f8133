from apsclient.display import (
    ACTIVE_CHANNELS_TITLE,
    BEAM_LABELS,
    RECEIVING_LABELS,
    SECTOR_LABELS,
    SPACECRAFT_TITLE,
    format_connection,
    format_data_channel_message,
    format_receiving_message,
)
from apsclient.messages import (
    DataChannelInfo,
    DataChannelMessage,
    DataChannelSegment,
    DataChannelSession,
    ReceivingMessage,
)
from apsclient.store import ConnectionInfo


def _receiving():
    return ReceivingMessage(
        center_frequency=1544500,
        spacecraft_number=42,
        coordinates=(120, -35),
        channel_number=7,
        direction_of_polarization=2,
        level_of_signal=1.5,
        receiving_sector_number=3,
        state=1,
        azimuth_start_sector=10,
        azimuth_end_sector=90,
    )


def _session(channel):
    return DataChannelSession(channel, 1, 2, 0, 42, 1544500, 45000.5, 45001.5, (100, 200))


def _segment(count):
    return DataChannelSegment(1, 2, 0, 42, 1544500, 45000.5, 45001.5,
                              tuple(_session(i) for i in range(count)))


def test_connection_lines():
    info = ConnectionInfo(id=3, name_connection="Station", tcp_ac="host-a:9999", tcp_p2="host-b")
    assert format_connection(info).split("\n") == [
        "Station",
        "П1: host-a:9999",
        "П2: host-b",
    ]


def test_empty_connection():
    assert format_connection(ConnectionInfo()) == "\nП1: \nП2: "


def test_receiving_title():
    lines = format_receiving_message(_receiving()).split("\n")
    assert lines[0] == SPACECRAFT_TITLE + "42"
    assert lines[0] == "Номер космического аппарата: 42"


def test_receiving_fields():
    lines = format_receiving_message(_receiving()).split("\n")
    labels = RECEIVING_LABELS + SECTOR_LABELS + BEAM_LABELS
    assert len(lines) == 1 + len(labels)
    assert [line.split(": ")[0] for line in lines[1:]] == list(labels)
    values = [line.split(": ")[1] for line in lines[1:]]
    assert values == ["1544500", "7", "1", "2", "3", "1.5", "10", "90", "120", "-35"]


def test_receiving_frequency_label_from_source():
    text = format_receiving_message(_receiving())
    assert "Центральная частота в кГц: 1544500" in text
    assert "Текущий угол места луча: -35" in text


def test_data_channel_empty():
    assert format_data_channel_message(DataChannelMessage()) == ACTIVE_CHANNELS_TITLE + "0"


def test_data_channel_line_count():
    message = DataChannelMessage((
        DataChannelInfo(5, (_segment(2), _segment(0))),
        DataChannelInfo(6, ()),
    ))
    lines = format_data_channel_message(message).split("\n")
    # title + 2 channel lines + 2 segment lines + 2 target lines
    assert len(lines) == 1 + 2 + 2 + 2
    assert lines[0] == ACTIVE_CHANNELS_TITLE + "2"


def test_data_channel_contents():
    message = DataChannelMessage((DataChannelInfo(5, (_segment(1),)),))
    lines = format_data_channel_message(message).split("\n")
    assert lines[1].startswith("Канал 5")
    assert lines[2].startswith("    ")
    assert lines[3].startswith("        ")
    assert "КА 42" in lines[3]
    assert "азимут 100" in lines[3]
    assert "угол места 200" in lines[3]