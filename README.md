# apsclient

A console operator client for a receiving antenna system. It connects to two
TCP endpoints (AC and P2), keeps saved connection profiles in an XML file,
sends target designations, stop and state requests to the AC endpoint, and
decodes the binary replies that come back.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running the client

```
apsclient [--store PATH] [--timeout SECONDS]
```

- `--store` — file of saved connections (default `../connection_parameters.xml`,
  relative to the working directory).
- `--timeout` — seconds to wait for a command acknowledgement (default 10).

The client reads commands line by line from standard input until the input
ends or `quit` is given. Errors are printed as `error: ...` and the client
carries on.

```
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
help, quit
```

Addresses are written as `host`, `host:port` or `tcp://host:port`; the port
defaults to 9999. After `connect` the client retries every two seconds and
reports failure if both endpoints are not up within ten seconds. After `stop`
or `target send` it waits for the station's acknowledgement and reports a
timeout if none arrives. Receiving reports and data channel states are printed
as they arrive.

## Modules

- `apsclient.messages` — wire structures. `Header` (16 bytes, encoded
  big-endian for sending, decoded little-endian on receipt), `Packet`,
  `ByteReader`, the reply types `ExecutedTheCommand`, `ReceiveState` /
  `ReceivingMessage`, `DataChannelMessage` / `DataChannelInfo` /
  `DataChannelSegment` / `DataChannelSession`, the command
  `TargetDesignations`, and the enums `ConnectionStatus` and `MessageType`.
- `apsclient.tcpsocket` — `parse_host_port`, `PacketDecoder` (splits a byte
  stream into packets with sequential ids) and `TcpSocket`.
- `apsclient.idprovider` — `SequentialIdProvider`, a thread-safe shared
  counter.
- `apsclient.manager` — `ConnectionManager`, which keeps both connections up,
  sends commands and reports events to a `ConnectionListener`.
- `apsclient.store` — `ConnectionInfo` and `ConnectionStore`, the XML file of
  saved connections; new entries get the next free id.
- `apsclient.connections` — `ConnectionsList`, `ConnectionForm`,
  `validate_address` and `status_message`.
- `apsclient.targets` — `CoordinateTable`, `TargetDesignationForm` (raises
  `TargetValidationError` for invalid fields) and `command_result_text`.
- `apsclient.display` — `format_receiving_message`, `format_connection` and
  `format_data_channel_message`.
- `apsclient.app` — `Application` and `main`.

## Using it as a library

```python
from apsclient.messages import ByteReader, ExecutedTheCommand, Header

header = Header.decode(raw_header_bytes)
result = ExecutedTheCommand.read(ByteReader(payload))
```

Times on the wire are OLE Automation dates (days since 30 December 1899);
`apsclient.helpers.to_oa_date` and `current_oa_date` produce them.

## What it does not do

- There is no graphical interface: connection profiles, command forms and
  station reports are all handled as text on the console.
- Data channel states are only printed; they are not kept or tabulated.
- Only packets from the AC endpoint are decoded; the P2 connection is opened
  and kept but nothing received on it is interpreted.