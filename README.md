# chainchat

A peer-to-peer chat node for the terminal. Every node holds the whole chat
history as an archive of messages. Each message carries a 16-byte
verification code. The code is mined until the MD5 digest of the message,
together with up to 19 messages before it, starts with two zero bytes. When a
node receives an archive from a peer, it checks the archive. It adopts that
archive only if it is valid and longer than the one it already holds.

Nodes talk over TCP, on port 51511 by default. Every five seconds each side of
a connection asks the other for its peer list and its archive, and sends its
own archive as well. A node connects to every new peer it learns about.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Usage

Start a node that waits for others to connect:

```
chainchat
```

Start a node and connect to a known peer at once:

```
chainchat 192.0.2.10
```

A peer may be given as `ip` or as `ip:port`. Without a port, the node's own
port is used. If the listening port cannot be bound, an error is printed to
standard error. The command loop still runs.

The node then reads commands from standard input:

| Command | Short | Effect |
|---|---|---|
| `chat <message>` | `c` | mine and add a new message |
| `history` | `h` | list the whole chat history |
| `peers` | `p` | show known peers |
| `status` | `s` | show port, peer count and archive size |
| `addpeer <ip>` | `a` | connect to another peer |
| `filechat <file>` | `f` | add every line of a text file as a message |
| `help` | `?` | show the command list |
| `quit` | `q` | leave |

The loop also ends at the end of input. A message must be 1 to 255 printable
ASCII characters, and spaces are allowed. An invalid message is reported and
is not added.

## Library use

The building blocks can be used on their own:

```python
from chainchat.archive import Archive

archive = Archive()
chat = archive.add_message("hello")
assert archive.is_valid()
restored = Archive.from_bytes(archive.to_bytes())
assert len(restored) == 1
```

- `chainchat.message` defines the wire types `MessageType` and `Chat`. It
  also defines `DecodeError`, which is raised on malformed bytes.
- `chainchat.archive` provides `Archive` and `is_valid_message`.
  `Archive.add_message` raises `ValueError` for an invalid message.
- `chainchat.peer.PeerList` tracks known IPv4 peers as integers.
- `chainchat.node.P2PNode(port)` runs the networking. Use `start_listener()`,
  which returns the bound port, and `connect_to_peer(addr)`.
- `chainchat.cli` provides `handle_command`, `user_input_loop` and `main`.
- `chainchat.logger` is a small levelled logger. It offers `set_log_level`,
  `set_log_file` and `set_log_time`, with `debug`, `info`, `warn`, `error`
  and `fatal`. The command sets the level to `LogLevel.OFF`, so by default it
  prints no log output.

## Limitations

- The archive is kept in memory only. Nothing is saved to disk, so the
  history is lost when the node exits unless a peer still holds it.
- The command line has no option to pick the listening port. It always uses
  51511. `P2PNode(port)` accepts another port when used as a library.
- Connections are plain TCP, with no encryption or authentication.
- Notification messages that are received are only logged. No command sends
  them.

## Running the tests

```
pytest
```