"""Wire message types and the chat record encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

CODE_SIZE = 16
HASH_SIZE = 16


class DecodeError(ValueError):
    """Raised when bytes do not hold a well-formed record."""


class MessageType(IntEnum):
    """First byte of every protocol message."""

    PEER_REQUEST = 0x1
    PEER_RESPONSE = 0x2
    ARCHIVE_REQUEST = 0x3
    ARCHIVE_RESPONSE = 0x4
    NOTIFICATION_MESSAGE = 0x5


def is_valid_message_type(value: int) -> bool:
    """Return True if ``value`` is a known message type byte."""
    return 0x1 <= value <= 0x5


@dataclass
class Chat:
    """One chat entry: message text, mined verification code and its MD5 hash."""

    message: str
    verification_code: bytes = field(default=bytes(CODE_SIZE))
    md5_hash: bytes = field(default=bytes(HASH_SIZE))

    def __post_init__(self) -> None:
        self.verification_code = bytes(self.verification_code)
        self.md5_hash = bytes(self.md5_hash)
        if len(self.verification_code) != CODE_SIZE:
            raise ValueError(f"verification code must be {CODE_SIZE} bytes")
        if len(self.md5_hash) != HASH_SIZE:
            raise ValueError(f"md5 hash must be {HASH_SIZE} bytes")

    def to_bytes(self) -> bytes:
        """Encode as length byte, message, verification code, hash."""
        encoded = self.message.encode("utf-8")
        if len(encoded) > 255:
            raise ValueError("message longer than 255 bytes")
        return bytes([len(encoded)]) + encoded + self.verification_code + self.md5_hash

    @classmethod
    def from_bytes(cls, data: bytes) -> tuple[Chat, int]:
        """Decode a chat from the start of ``data``; return it and the bytes consumed."""
        if not data:
            raise DecodeError("no data for chat")
        msg_len = data[0]
        size = 1 + msg_len + CODE_SIZE + HASH_SIZE
        if len(data) < size:
            raise DecodeError("truncated chat record")
        try:
            message = bytes(data[1 : 1 + msg_len]).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("chat message is not valid UTF-8") from exc
        code_start = 1 + msg_len
        hash_start = code_start + CODE_SIZE
        chat = cls(
            message=message,
            verification_code=bytes(data[code_start:hash_start]),
            md5_hash=bytes(data[hash_start:size]),
        )
        return chat, size