"""Console front end: connection selection, station commands and incoming reports."""

from __future__ import annotations

import argparse
import enum
import shlex
import sys
import threading
from datetime import datetime
from typing import Callable, Iterable, Optional, TextIO

from apsclient.connections import ConnectionForm, ConnectionsList, status_message
from apsclient.display import (
    format_connection,
    format_data_channel_message,
    format_receiving_message,
)
from apsclient.helpers import from_str_to_int
from apsclient.manager import ConnectionManager
from apsclient.messages import (
    ConnectionStatus,
    DataChannelMessage,
    ExecutedTheCommand,
    ReceivingMessage,
)
from apsclient.store import DEFAULT_PATH, ConnectionStore
from apsclient.targets import (
    POLARIZATIONS,
    TIMEOUT_TEXT,
    WAITING_TEXT,
    TargetDesignationForm,
    command_result_text,
)

COMMAND_TIMEOUT = 10.0

STOP_WAITING_TEXT = "Ожидания ответа от программы на остановку приема"
STOP_TIMEOUT_TEXT = "Результат исполнения команды:\nНет ответа от АС."
STOP_SUCCESS_TEXT = (
    "Успешное завершение приема по всем каналам. "
    "Переход в режим ожидания новых планов слежения"
)
STOP_ERROR_PREFIX = "Результат исполнения команды: \n Ошибка \n"

HELP_TEXT = """\
Connections:
  list                      show saved connections
  select <id>               fill the fields from a saved connection
  set name|ac|p2 <value>    edit a field
  save | remove | clear     store, delete or empty the fields
  connect | cancel          connect to the AC and P2 addresses, or give up
Commands (when connected):
  stop                      stop receiving on all channels
  state                     request the state of the data channels
  target start|end <ISO date-time>
  target frequency|channel|spacecraft|polarization <value>
  target add <azimuth> <elevation>
  target reset | show | send
  messages                  show the latest receiving reports
  exit                      disconnect from the station
help, quit"""


class PendingCommand(enum.Enum):
    """Command whose acknowledgement is awaited."""

    STOP = "stop"
    TARGET = "target"


def stop_result_text(result: ExecutedTheCommand) -> str:
    """Text reporting the station's answer to a stop command."""
    if result.result == 0:
        return STOP_SUCCESS_TEXT
    return STOP_ERROR_PREFIX + str(result.result)


class Application:
    """Drives a ConnectionManager from text commands and reports what the station sends."""

    def __init__(
        self,
        manager: Optional[ConnectionManager] = None,
        connections: Optional[ConnectionsList] = None,
        *,
        output: Optional[TextIO] = None,
        command_timeout: float = COMMAND_TIMEOUT,
        now: Optional[datetime] = None,
    ) -> None:
        self.output = output if output is not None else sys.stdout
        self.command_timeout = command_timeout
        if manager is None:
            manager = ConnectionManager(self)
        else:
            manager.listener = self
        self.manager = manager
        self.connections = connections if connections is not None else ConnectionsList()
        self.form = ConnectionForm(self.connections)
        self.target_form = TargetDesignationForm(now)
        self.received: list[ReceivingMessage] = []
        self._connected = False
        self._pending: Optional[PendingCommand] = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._output_lock = threading.Lock()
        self._commands: dict[str, Callable[[list[str]], None]] = {
            "help": self._cmd_help,
            "list": self._cmd_list,
            "select": self._cmd_select,
            "set": self._cmd_set,
            "save": self._cmd_save,
            "remove": self._cmd_remove,
            "clear": self._cmd_clear,
            "connect": self._cmd_connect,
            "cancel": self._cmd_cancel,
            "exit": self._cmd_exit,
            "disconnect": self._cmd_exit,
            "stop": self._cmd_stop,
            "state": self._cmd_state,
            "target": self._cmd_target,
            "messages": self._cmd_messages,
        }

    def __enter__(self) -> "Application":
        return self

    def __exit__(self, *exc_info) -> None:
        self._take_pending()
        self.manager.close()

    @property
    def connected(self) -> bool:
        """Whether both station connections are up."""
        return self._connected

    @property
    def pending(self) -> Optional[PendingCommand]:
        """The command awaiting an acknowledgement, if any."""
        with self._lock:
            return self._pending

    # Events reported by the connection manager.

    def on_connection_changed(self, status: ConnectionStatus) -> None:
        """Track the connection state and tell the user about failures."""
        status = ConnectionStatus(status)
        self._connected = status == ConnectionStatus.CONNECTED
        message = status_message(status)
        if message is not None:
            self._say(message.text)

    def on_state_changed(self, status: ConnectionStatus) -> None:
        self.on_connection_changed(status)

    def on_executed_the_command(self, result: ExecutedTheCommand) -> None:
        """Report the acknowledgement of the awaited command; ignore it otherwise."""
        kind = self._take_pending()
        if kind is None:
            return
        if kind is PendingCommand.STOP:
            self._say(stop_result_text(result))
        else:
            self._say(command_result_text(result))

    def on_timeout(self) -> None:
        """Report that the awaited acknowledgement did not come."""
        kind = self._take_pending()
        if kind is None:
            return
        self._say(STOP_TIMEOUT_TEXT if kind is PendingCommand.STOP else TIMEOUT_TEXT)

    def on_receiving_message(self, message: ReceivingMessage) -> None:
        self.received.append(message)
        self._say(format_receiving_message(message))

    def on_receiving_message_empty(self) -> None:
        self.received.clear()

    def on_data_channel_message(self, message: DataChannelMessage) -> None:
        self._say(format_data_channel_message(message))

    # Commands.

    def handle_command(self, line: str) -> bool:
        """Execute one command line; return False when the user asked to quit.

        Raises ValueError for an unknown or malformed command.
        """
        words = shlex.split(line)
        if not words:
            return True
        name, args = words[0].lower(), words[1:]
        if name == "quit":
            return False
        handler = self._commands.get(name)
        if handler is None:
            raise ValueError(f"unknown command: {name}")
        handler(args)
        return True

    def run(self, stream: Iterable[str]) -> None:
        """Execute commands from the lines of a stream until it ends or says quit."""
        for line in stream:
            try:
                if not self.handle_command(line):
                    break
            except (ValueError, OSError) as exc:
                self._say(f"error: {exc}")

    def _say(self, text: str) -> None:
        with self._output_lock:
            self.output.write(text + "\n")
            self.output.flush()

    def _require_connected(self) -> None:
        if not self._connected:
            raise ValueError("not connected")

    def _start_waiting(self, kind: PendingCommand, text: str) -> None:
        timer = threading.Timer(self.command_timeout, self.on_timeout)
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = kind
            self._timer = timer
        timer.start()
        self._say(text)

    def _take_pending(self) -> Optional[PendingCommand]:
        with self._lock:
            kind, self._pending = self._pending, None
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        return kind

    def _send_awaited(self, kind: PendingCommand, text: str, send: Callable[[], None]) -> None:
        self._start_waiting(kind, text)
        try:
            send()
        except Exception:
            self._take_pending()
            raise

    @staticmethod
    def _expect(args: list[str], count: int, usage: str) -> None:
        if len(args) != count:
            raise ValueError(f"usage: {usage}")

    def _cmd_help(self, args: list[str]) -> None:
        self._say(HELP_TEXT)

    def _cmd_list(self, args: list[str]) -> None:
        for row in self.connections.rows:
            self._say(f"[{row.id}] " + format_connection(row).replace("\n", "\n    "))

    def _cmd_select(self, args: list[str]) -> None:
        self._expect(args, 1, "select <id>")
        info = self.form.select(from_str_to_int(args[0]))
        if info.id == -1:
            raise ValueError(f"no connection with id {args[0]}")
        self._say(format_connection(info))

    def _cmd_set(self, args: list[str]) -> None:
        if len(args) < 1:
            raise ValueError("usage: set name|ac|p2 <value>")
        field, value = args[0].lower(), " ".join(args[1:])
        if field == "name":
            self.form.name_connection = value
        elif field == "ac":
            self.form.tcp_ac = value
        elif field == "p2":
            self.form.tcp_p2 = value
        else:
            raise ValueError(f"unknown field: {field}")

    def _cmd_save(self, args: list[str]) -> None:
        saved = self.form.save()
        if saved is None:
            raise ValueError("nothing to save")
        self._say(f"saved [{saved.id}]")

    def _cmd_remove(self, args: list[str]) -> None:
        if not self.form.remove():
            raise ValueError("no connection selected")

    def _cmd_clear(self, args: list[str]) -> None:
        self.form.clear()

    def _cmd_connect(self, args: list[str]) -> None:
        request = self.form.connect_request()
        if request is None:
            raise ValueError("invalid AC or P2 address")
        self.manager.connect_to_host(*request)

    def _cmd_cancel(self, args: list[str]) -> None:
        self.manager.cancel()

    def _cmd_exit(self, args: list[str]) -> None:
        self._require_connected()
        self.received.clear()
        self.manager.disconnect()

    def _cmd_stop(self, args: list[str]) -> None:
        self._require_connected()
        self._send_awaited(PendingCommand.STOP, STOP_WAITING_TEXT, self.manager.stop_messages)

    def _cmd_state(self, args: list[str]) -> None:
        self._require_connected()
        self.manager.request_state_of_data()

    def _cmd_messages(self, args: list[str]) -> None:
        for message in self.received:
            self._say(format_receiving_message(message))

    def _cmd_target(self, args: list[str]) -> None:
        self._require_connected()
        if not args:
            raise ValueError("usage: target <field|add|reset|show|send> ...")
        form = self.target_form
        action, rest = args[0].lower(), args[1:]
        if action in ("start", "end"):
            self._expect(rest, 1, f"target {action} <ISO date-time>")
            moment = datetime.fromisoformat(rest[0])
            if action == "start":
                form.start_time = moment
            else:
                form.end_time = moment
        elif action == "frequency":
            self._expect(rest, 1, "target frequency <kHz>")
            form.center_frequency = rest[0]
        elif action == "channel":
            self._expect(rest, 1, "target channel <1-13>")
            form.channel_number = rest[0]
        elif action == "spacecraft":
            self._expect(rest, 1, "target spacecraft <number>")
            form.spacecraft_number = rest[0]
        elif action == "polarization":
            self._expect(rest, 1, "target polarization <code>")
            code = from_str_to_int(rest[0])
            if code not in POLARIZATIONS:
                raise ValueError(f"unknown polarization: {rest[0]}")
            form.polarization = code
        elif action == "add":
            self._expect(rest, 2, "target add <azimuth> <elevation>")
            if not form.add_coordinate(rest[0], rest[1]):
                raise ValueError("azimuth and elevation must be numbers")
        elif action == "reset":
            form.reset()
        elif action == "show":
            for azimuth, elevation in form.coordinates:
                self._say(f"{azimuth} {elevation}")
        elif action == "send":
            target = form.create_target()
            self._send_awaited(
                PendingCommand.TARGET,
                WAITING_TEXT,
                lambda: self.manager.send_target_design(target),
            )
        else:
            raise ValueError(f"unknown target action: {action}")


def main(argv: Optional[list[str]] = None) -> int:
    """Run the console client on standard input."""
    parser = argparse.ArgumentParser(description="Receiving station control client")
    parser.add_argument("--store", default=DEFAULT_PATH, help="file of saved connections")
    parser.add_argument(
        "--timeout",
        type=float,
        default=COMMAND_TIMEOUT,
        help="seconds to wait for a command acknowledgement",
    )
    args = parser.parse_args(argv)
    app = Application(
        connections=ConnectionsList(ConnectionStore(args.store)),
        command_timeout=args.timeout,
    )
    with app:
        app.run(sys.stdin)
    return 0


if __name__ == "__main__":
    sys.exit(main())