"""Saved connection list and the connection entry form."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from apsclient.messages import ConnectionStatus
from apsclient.store import ConnectionInfo, ConnectionStore
from apsclient.tcpsocket import parse_host_port

STATUS_TITLE = "Статус подключения"


@dataclass(frozen=True)
class StatusMessage:
    """A message shown to the user when the connection state changes."""

    text: str
    severity: str
    title: str = STATUS_TITLE


def validate_address(text: str) -> bool:
    """Whether the text names a host, with an optional valid port."""
    try:
        parse_host_port(text)
    except ValueError:
        return False
    return True


def status_message(status: ConnectionStatus) -> Optional[StatusMessage]:
    """Message for a connection state, or None when nothing is to be shown."""
    if status == ConnectionStatus.UNCONNECTED:
        return StatusMessage("Невозможно подключиться к сокету", "critical")
    if status == ConnectionStatus.DISCONNECTED:
        return StatusMessage("Отключение от сокетов", "warning")
    return None


class ConnectionsList:
    """Connections shown to the user, backed by a ConnectionStore."""

    def __init__(self, store: Optional[ConnectionStore] = None) -> None:
        self.store = store if store is not None else ConnectionStore()
        self._rows: list[ConnectionInfo] = []
        self.current_row: Optional[int] = None
        for info in self.store.elements():
            self.add_connection(info)

    @property
    def rows(self) -> list[ConnectionInfo]:
        """Connections in display order."""
        return [dataclasses.replace(row) for row in self._rows]

    def select(self, connection_id: int) -> None:
        """Make the row with this id the current one, if there is such a row."""
        for index, row in enumerate(self._rows):
            if row.id == connection_id:
                self.current_row = index
                return

    def clear_selection(self) -> None:
        """Leave no row current."""
        self.current_row = None

    def connection_info(self, connection_id: int) -> ConnectionInfo:
        """Connection known this session under the id, or an empty one."""
        return self.store.element(connection_id)

    def add_connection(self, info: ConnectionInfo) -> ConnectionInfo:
        """Save a connection and append it to the list."""
        saved = self.store.save(info)
        self._rows.append(dataclasses.replace(saved))
        return saved

    def remove_connection(self, connection_id: int) -> None:
        """Drop a connection from the list and from the file."""
        for index, row in enumerate(self._rows):
            if row.id == connection_id:
                del self._rows[index]
                break
        self.current_row = None
        self.store.remove(connection_id)

    def change_connection(self, last_id: int, info: ConnectionInfo) -> ConnectionInfo:
        """Replace a connection with new values; the new one becomes current."""
        self.remove_connection(last_id)
        replacement = self.add_connection(info)
        self.store.change(last_id, replacement)
        self.current_row = len(self._rows) - 1
        return replacement


class ConnectionForm:
    """Fields for editing a connection and choosing one to connect to."""

    def __init__(self, connections: ConnectionsList) -> None:
        self.connections = connections
        self.selected = ConnectionInfo()
        self.name_connection = ""
        self.tcp_ac = ""
        self.tcp_p2 = ""

    def _show(self, info: ConnectionInfo) -> None:
        self.name_connection = info.name_connection
        self.tcp_ac = info.tcp_ac
        self.tcp_p2 = info.tcp_p2

    def select(self, connection_id: int) -> ConnectionInfo:
        """Pick a connection and fill the fields from it."""
        info = self.connections.connection_info(connection_id)
        self.connections.select(connection_id)
        self.selected = info
        self._show(info)
        return info

    def save(self) -> Optional[ConnectionInfo]:
        """Store the fields as a new connection or over the selected one."""
        info = ConnectionInfo(
            name_connection=self.name_connection,
            tcp_ac=self.tcp_ac,
            tcp_p2=self.tcp_p2,
        )
        if not any(text.strip() for text in (info.name_connection, info.tcp_ac, info.tcp_p2)):
            return None
        if self.selected.id == -1:
            return self.connections.add_connection(info)
        replacement = self.connections.change_connection(self.selected.id, info)
        self.select(replacement.id)
        return replacement

    def remove(self) -> bool:
        """Delete the selected connection; return whether one was deleted."""
        if self.selected.id != -1 and self.selected.name_connection.strip():
            self.connections.remove_connection(self.selected.id)
            return True
        return False

    def clear(self) -> None:
        """Empty the fields and drop the selection."""
        self._show(ConnectionInfo())
        self.selected = ConnectionInfo()
        self.connections.clear_selection()

    def connect_request(self) -> Optional[tuple[str, str]]:
        """The AC and P2 addresses to connect to, or None if either is invalid."""
        if validate_address(self.tcp_ac) and validate_address(self.tcp_p2):
            return self.tcp_ac.strip(), self.tcp_p2.strip()
        return None