"""The set of known peers, keyed by IPv4 address as an integer."""

from __future__ import annotations

import struct
from typing import Iterable

from chainchat.message import MessageType


class PeerList:
    """Known peer IPv4 addresses held as 32-bit integers."""

    def __init__(self) -> None:
        self._peers: set[int] = set()

    def add_peer(self, ip: int) -> None:
        """Add a peer address."""
        self._peers.add(ip)

    def remove_peer(self, ip: int) -> None:
        """Remove a peer address if present."""
        self._peers.discard(ip)

    def add_and_get_new_peers(self, new_ips: Iterable[int]) -> list[int]:
        """Add all addresses; return those that were not known before, in input order."""
        fresh = []
        for ip in new_ips:
            if ip not in self._peers:
                self._peers.add(ip)
                fresh.append(ip)
        return fresh

    def to_bytes(self) -> bytes:
        """Encode as a peer-response message."""
        header = struct.pack(">BI", MessageType.PEER_RESPONSE, len(self._peers))
        return header + b"".join(struct.pack(">I", ip) for ip in self._peers)

    def get_ips(self) -> list[int]:
        """Return the known addresses in ascending order."""
        return sorted(self._peers)

    def __len__(self) -> int:
        return len(self._peers)

    def __contains__(self, ip: object) -> bool:
        return ip in self._peers