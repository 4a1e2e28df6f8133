"""Target designation entry: the coordinate table and the command form."""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional

from apsclient.helpers import from_str_to_int, to_oa_date
from apsclient.messages import ExecutedTheCommand, TargetDesignations

COLUMN_HEADERS = ("Текущий азимут", "Текущий угол места")

POLARIZATIONS = {
    0: "Правая круговая",
    1: "Левая круговая",
    2: "Вертикальная",
    3: "Горизонтальная",
    4: "Линейная +45%",
    5: "Линейная -45%",
}

CHANNEL_NUMBERS = range(1, 14)

WAITING_TEXT = "Ожидание статуса выполнения команды"
TIMEOUT_TEXT = "Данных об получении целеуказаний нет.\nАС не работоспособна."

_INT16_MIN = -(2**15)
_INT16_MAX = 2**15 - 1


class CoordinateTable:
    """Ordered azimuth/elevation pairs with two columns."""

    column_count = 2

    def __init__(self) -> None:
        self._values: list[tuple[int, int]] = []

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._values)

    @property
    def coordinates(self) -> tuple[tuple[int, int], ...]:
        """All pairs in insertion order."""
        return tuple(self._values)

    def append(self, azimuth: int, elevation: int) -> None:
        """Add a pair; both values must fit in a signed 16-bit integer."""
        for value in (azimuth, elevation):
            if not _INT16_MIN <= value <= _INT16_MAX:
                raise ValueError(f"coordinate {value} does not fit in 16 bits")
        self._values.append((azimuth, elevation))

    def clear(self) -> None:
        """Remove every pair."""
        self._values.clear()

    def header(self, section: int) -> str:
        """Title of a column, empty for an unknown column."""
        if 0 <= section < len(COLUMN_HEADERS):
            return COLUMN_HEADERS[section]
        return ""

    def value(self, row: int, column: int) -> Optional[int]:
        """Value at a cell, or None outside the table."""
        if 0 <= row < len(self._values) and 0 <= column < self.column_count:
            return self._values[row][column]
        return None


class TargetValidationError(ValueError):
    """The form holds a value that cannot go into a target designation."""


class TargetDesignationForm:
    """Fields of a target designation command and their validation."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        moment = now if now is not None else datetime.now()
        self.start_time: Optional[datetime] = moment
        self.end_time: Optional[datetime] = moment
        self.center_frequency = ""
        self.channel_number = "1"
        self.spacecraft_number = ""
        self.polarization = 0
        self.coordinates = CoordinateTable()

    def reset(self) -> None:
        """Empty the coordinate table and the text fields."""
        self.coordinates.clear()
        self.center_frequency = ""
        self.channel_number = "1"
        self.spacecraft_number = ""

    def add_coordinate(self, azimuth_text: str, elevation_text: str) -> bool:
        """Add a pair typed as text; return whether both values were numbers."""
        azimuth = from_str_to_int(azimuth_text)
        elevation = from_str_to_int(elevation_text)
        if azimuth == -1 or elevation == -1:
            return False
        self.coordinates.append(azimuth, elevation)
        return True

    def create_target(self) -> TargetDesignations:
        """Validate the fields and build the command."""
        if self.start_time is None:
            raise TargetValidationError("Некорректный формат времени начала")
        if self.end_time is None:
            raise TargetValidationError("Некорректный формат времени окончания")

        frequency = from_str_to_int(self.center_frequency)
        if frequency <= 0:
            raise TargetValidationError(
                "Центральная частота должна быть положительным числом"
            )

        channel = from_str_to_int(self.channel_number)
        if channel not in CHANNEL_NUMBERS:
            raise TargetValidationError("Номер канала должен быть от 1 до 13")

        spacecraft = from_str_to_int(self.spacecraft_number)
        if spacecraft <= 0:
            raise TargetValidationError("Номер КА должен быть положительным числом")

        if not len(self.coordinates):
            raise TargetValidationError("Добавьте хотя бы одну пару координат")

        return TargetDesignations(
            channel_number=channel,
            direction_of_polarization=int(self.polarization),
            spacecraft_number=spacecraft,
            center_frequency=frequency,
            plan_start_time=to_oa_date(self.start_time),
            plan_end_time=to_oa_date(self.end_time),
            coordinates=self.coordinates.coordinates,
        )


def command_result_text(result: ExecutedTheCommand) -> str:
    """Text reporting the station's answer to a target designation."""
    if result.result == 0:
        return "Целеуказание успешно получено программой АС"
    return "Целеуказание принято с ошибкой. Код ошибки:" + str(result.result)