"""The chat archive: a proof-of-work chain of chat messages."""

from __future__ import annotations

import hashlib
import os
import struct
from dataclasses import dataclass, field

from chainchat import logger
from chainchat.message import HASH_SIZE, Chat, DecodeError, MessageType

WINDOW = 20
MAX_MESSAGE_LEN = 255


def is_valid_message(message: str) -> bool:
    """A message must be 1..255 printable ASCII characters (32..126)."""
    return (
        0 < len(message) <= MAX_MESSAGE_LEN
        and all(32 <= ord(c) <= 126 for c in message)
    )


def _meets_difficulty(digest: bytes) -> bool:
    return digest[0] == 0 and digest[1] == 0


def _hash_input(previous: list[Chat], chat: Chat) -> bytes:
    """Bytes hashed for ``chat``: the preceding window plus the chat minus its hash."""
    head = b"".join(c.to_bytes() for c in previous)
    return head + chat.to_bytes()[:-HASH_SIZE]


@dataclass
class Archive:
    """Ordered list of mined chats."""

    chats: list[Chat] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Encode as an archive-response message."""
        header = struct.pack(">BI", MessageType.ARCHIVE_RESPONSE, len(self.chats))
        return header + b"".join(chat.to_bytes() for chat in self.chats)

    @classmethod
    def from_bytes(cls, data: bytes) -> Archive:
        """Decode an archive-response message; raise DecodeError if malformed."""
        if len(data) < 5 or data[0] != MessageType.ARCHIVE_RESPONSE:
            raise DecodeError("not an archive response")
        (count,) = struct.unpack(">I", data[1:5])
        chats = []
        offset = 5
        for _ in range(count):
            chat, size = Chat.from_bytes(data[offset:])
            chats.append(chat)
            offset += size
        return cls(chats)

    def is_valid(self) -> bool:
        """Check every chat's difficulty, messages and hash chain."""
        return all(self._is_valid_at(index) for index in range(len(self.chats)))

    def _is_valid_at(self, index: int) -> bool:
        chat = self.chats[index]
        if not _meets_difficulty(chat.md5_hash):
            return False
        start = max(0, index - (WINDOW - 1))
        window = self.chats[start : index + 1]
        if not all(is_valid_message(c.message) for c in window):
            return False
        digest = hashlib.md5(_hash_input(window[:-1], chat)).digest()
        return digest == chat.md5_hash

    def add_message(self, message: str) -> Chat:
        """Mine a verification code for ``message``, append and return the chat.

        Raises ValueError if the message is not 1..255 printable ASCII characters.
        """
        if not is_valid_message(message):
            raise ValueError(
                "Erro: Mensagem inválida. Deve conter entre 1 e 255 caracteres ASCII (32-126)."
            )
        logger.info(f"Minerando código de verificação para a mensagem: '{message}'...")
        previous = self.chats[max(0, len(self.chats) - (WINDOW - 1)) :]
        while True:
            candidate = Chat(message, os.urandom(16))
            digest = hashlib.md5(_hash_input(previous, candidate)).digest()
            if _meets_difficulty(digest):
                break
        chat = Chat(message, candidate.verification_code, digest)
        self.chats.append(chat)
        logger.info(f"Código de verificação minerado: {chat.verification_code.hex()}")
        logger.info(f"Hash MD5 da mensagem: {digest.hex()}")
        return chat

    def __len__(self) -> int:
        return len(self.chats)