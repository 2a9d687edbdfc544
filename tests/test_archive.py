import hashlib

import pytest

from chainchat.archive import Archive, is_valid_message
from chainchat.message import Chat, DecodeError


@pytest.fixture(scope="module")
def mined():
    archive = Archive()
    for text in ["hello", "second message", "third ~ one!"]:
        archive.add_message(text)
    return archive


@pytest.mark.parametrize(
    "text,expected",
    [
        ("hello", True),
        ("", False),
        ("a" * 255, True),
        ("a" * 256, False),
        ("tab\there", False),
        ("caf\u00e9", False),
        ("~ !", True),
    ],
)
def test_is_valid_message(text, expected):
    assert is_valid_message(text) is expected


def test_empty_archive_is_valid():
    archive = Archive()
    assert archive.is_valid() is True
    assert len(archive) == 0
    assert archive.to_bytes() == b"\x04\x00\x00\x00\x00"


def test_mined_chats_meet_difficulty(mined):
    assert len(mined) == 3
    for chat in mined.chats:
        assert chat.md5_hash[:2] == b"\x00\x00"
    assert [c.message for c in mined.chats] == ["hello", "second message", "third ~ one!"]


def test_first_hash_covers_only_itself(mined):
    first = mined.chats[0]
    assert hashlib.md5(first.to_bytes()[:-16]).digest() == first.md5_hash


def test_second_hash_chains_previous(mined):
    first, second = mined.chats[:2]
    data = first.to_bytes() + second.to_bytes()[:-16]
    assert hashlib.md5(data).digest() == second.md5_hash


def test_mined_archive_is_valid(mined):
    assert mined.is_valid() is True


def test_round_trip(mined):
    data = mined.to_bytes()
    assert data[:5] == b"\x04\x00\x00\x00\x03"
    decoded = Archive.from_bytes(data)
    assert decoded == mined
    assert decoded.is_valid() is True


def test_tampered_message_is_invalid(mined):
    chats = [Chat(c.message, c.verification_code, c.md5_hash) for c in mined.chats]
    chats[0] = Chat("hellO", chats[0].verification_code, chats[0].md5_hash)
    assert Archive(chats).is_valid() is False


def test_reordered_chain_is_invalid(mined):
    assert Archive(list(reversed(mined.chats))).is_valid() is False


def test_unmined_chat_is_invalid():
    assert Archive([Chat("hello")]).is_valid() is False


def test_invalid_message_rejected():
    archive = Archive()
    with pytest.raises(ValueError):
        archive.add_message("")
    with pytest.raises(ValueError):
        archive.add_message("bad\nline")
    assert len(archive) == 0


def test_add_message_returns_appended_chat():
    archive = Archive()
    chat = archive.add_message("ping")
    assert archive.chats[-1] is chat
    assert chat.message == "ping"


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\x04\x00\x00",
        b"\x03\x00\x00\x00\x00",
        b"\x04\x00\x00\x00\x01",
        b"\x04\x00\x00\x00\x01\x02hi" + bytes(31),
    ],
)
def test_from_bytes_rejects_malformed(data):
    with pytest.raises(DecodeError):
        Archive.from_bytes(data)