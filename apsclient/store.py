"""Persistent list of saved connection parameters kept in an XML file."""

from __future__ import annotations

import dataclasses
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

DEFAULT_PATH = "../connection_parameters.xml"

_ROOT_TAG = "Connections"
_ITEM_TAG = "connection"


@dataclass
class ConnectionInfo:
    """Name and the two station addresses of one saved connection."""

    id: int = -1
    name_connection: str = ""
    tcp_ac: str = ""
    tcp_p2: str = ""


def _attr_int(value: Optional[str]) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        return 0


def _info_from_element(elem: ET.Element) -> ConnectionInfo:
    return ConnectionInfo(
        id=_attr_int(elem.get("id")),
        name_connection=elem.get("nameConnection", ""),
        tcp_ac=elem.get("tcpAC", ""),
        tcp_p2=elem.get("tcpP2", ""),
    )


class ConnectionStore:
    """Saved connections in an XML file, plus the ones touched this session."""

    def __init__(self, path: Union[str, os.PathLike] = DEFAULT_PATH) -> None:
        self.path = Path(path)
        self._cache: list[ConnectionInfo] = []

    def _load_root(self) -> Optional[ET.Element]:
        try:
            return ET.parse(self.path).getroot()
        except (OSError, ET.ParseError):
            return None

    def _write(self, root: Optional[ET.Element]) -> None:
        with open(self.path, "w", encoding="utf-8") as handle:
            if root is None:
                return
            tree = ET.ElementTree(root)
            ET.indent(tree, space="    ")
            tree.write(handle, encoding="unicode")
            handle.write("\n")

    @staticmethod
    def _remove_first(root: ET.Element, connection_id: int) -> None:
        parents = {child: parent for parent in root.iter() for child in parent}
        for elem in root.iter(_ITEM_TAG):
            if elem is root:
                continue
            if _attr_int(elem.get("id")) == connection_id:
                parents[elem].remove(elem)
                return

    def _next_id(self) -> int:
        existing = self.elements()
        if not existing:
            return 1
        return max(0, *(info.id for info in existing)) + 1

    def elements(self) -> list[ConnectionInfo]:
        """Read every saved connection from the file; empty if it is missing or broken."""
        root = self._load_root()
        if root is None:
            return []
        return [_info_from_element(e) for e in root.iter(_ITEM_TAG) if e is not root]

    def element(self, connection_id: int) -> ConnectionInfo:
        """Return a connection saved this session, or an empty one."""
        for item in self._cache:
            if item.id == connection_id:
                return dataclasses.replace(item)
        return ConnectionInfo()

    def save(self, info: ConnectionInfo) -> ConnectionInfo:
        """Write a connection to the file, giving it an id if it has none."""
        if info.id <= 0:
            info = dataclasses.replace(info, id=self._next_id())
        else:
            info = dataclasses.replace(info)

        root = self._load_root()
        if root is None:
            root = ET.Element(_ROOT_TAG)
        self._remove_first(root, info.id)

        ET.SubElement(
            root,
            _ITEM_TAG,
            {
                "id": str(info.id),
                "nameConnection": info.name_connection,
                "tcpAC": info.tcp_ac,
                "tcpP2": info.tcp_p2,
            },
        )
        self._write(root)
        self._cache.append(info)
        return dataclasses.replace(info)

    def change(self, connection_id: int, info: ConnectionInfo) -> None:
        """Replace the session entries with the given id."""
        self._cache = [
            dataclasses.replace(info) if item.id == connection_id else item
            for item in self._cache
        ]

    def remove(self, connection_id: int) -> None:
        """Delete a connection from the file."""
        root = self._load_root()
        if root is not None:
            self._remove_first(root, connection_id)
        self._write(root)