import pytest

from chainchat.message import Chat, DecodeError, MessageType, is_valid_message_type


def test_message_type_values():
    assert [int(m) for m in MessageType] == [1, 2, 3, 4, 5]
    assert MessageType(4) is MessageType.ARCHIVE_RESPONSE


@pytest.mark.parametrize("value,expected", [(0, False), (1, True), (5, True), (6, False), (255, False)])
def test_is_valid_message_type(value, expected):
    assert is_valid_message_type(value) is expected


def test_unknown_message_type_raises():
    with pytest.raises(ValueError):
        MessageType(6)


def test_chat_layout():
    code = bytes(range(16))
    digest = bytes(range(16, 32))
    chat = Chat("hi", code, digest)
    data = chat.to_bytes()
    assert data == b"\x02hi" + code + digest
    assert len(data) == 1 + 2 + 32


def test_chat_round_trip_with_trailing_data():
    chat = Chat("hello world", b"\x01" * 16, b"\x00\x00" + b"\xff" * 14)
    data = chat.to_bytes()
    decoded, size = Chat.from_bytes(data + b"extra")
    assert decoded == chat
    assert size == len(data)


def test_default_code_and_hash_are_zero():
    chat = Chat("x")
    assert chat.to_bytes() == b"\x01x" + bytes(32)


def test_from_bytes_empty():
    with pytest.raises(DecodeError):
        Chat.from_bytes(b"")


def test_from_bytes_truncated():
    data = Chat("abc").to_bytes()
    with pytest.raises(DecodeError):
        Chat.from_bytes(data[:-1])


def test_from_bytes_bad_utf8():
    data = b"\x01\xff" + bytes(32)
    with pytest.raises(DecodeError):
        Chat.from_bytes(data)


def test_wrong_code_length_rejected():
    with pytest.raises(ValueError):
        Chat("a", bytes(15), bytes(16))
    with pytest.raises(ValueError):
        Chat("a", bytes(16), bytes(17))


def test_overlong_message_cannot_encode():
    with pytest.raises(ValueError):
        Chat("a" * 256).to_bytes()