import os
import random
import sys
from unittest.mock import patch

import pytest

# テストファイルからパッケージルートへのパス
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from protocol.constants import ERROR_CODE_PROTOCOL, HEADER_LENGTH
from protocol.events import SocketAction
from protocol.framer import Framer, FramerState


def create_package(payload: bytes, proj_flag: bytes = b"ABCD", version: int = 1, pkg_size: int = None) -> bytes:
    """パッケージのバイト列を作成するヘルパー"""
    if pkg_size is None:
        pkg_size = HEADER_LENGTH + len(payload)
    return (
        proj_flag +
        version.to_bytes(2, byteorder="little") +
        pkg_size.to_bytes(4, byteorder="little") +
        payload
    )


@pytest.fixture
def messages():
    return []


@pytest.fixture
def framer(messages):
    return Framer(messages.append)


def payloads(messages):
    return [bytes(m.payload) for m in messages if m.action is SocketAction.DATA]


def test_initial_state(framer):
    assert framer.state is FramerState.AWAIT_HEADER
    assert framer.payload_length == 0
    assert framer.queue.buffered_bytes == 0


def test_single_package_in_one_chunk(framer, messages):
    framer.on_bytes(bytes.fromhex("41 42 43 44 01 00 0D 00 00 00 68 69 21"))

    assert payloads(messages) == [b"hi!"]
    assert framer.state is FramerState.AWAIT_HEADER
    assert framer.last_header.proj_flag == b"ABCD"
    assert framer.last_header.trans_layer_ver == 1
    assert framer.last_header.pkg_size == 13


def test_package_split_across_two_chunks(framer, messages):
    framer.on_bytes(bytes.fromhex("41 42 43 44 01 00 0D 00 00 00 68"))
    assert messages == []
    assert framer.state is FramerState.AWAIT_PAYLOAD
    assert framer.payload_length == 3

    framer.on_bytes(bytes.fromhex("69 21"))
    assert payloads(messages) == [b"hi!"]


def test_two_packages_in_one_chunk(framer, messages):
    chunk = create_package(b"X") + create_package(b"YY")
    assert len(chunk) == 23

    framer.on_bytes(chunk)

    assert payloads(messages) == [b"\x58", b"\x59\x59"]


def test_byte_by_byte_delivery(framer, messages):
    data = bytes.fromhex("41 42 43 44 01 00 0D 00 00 00 68 69 21")

    for i, b in enumerate(data):
        framer.on_bytes(bytes([b]))
        if i < len(data) - 1:
            assert messages == []

    assert payloads(messages) == [b"hi!"]


def test_empty_payload(framer, messages):
    framer.on_bytes(bytes.fromhex("41 42 43 44 01 00 0A 00 00 00"))

    assert len(messages) == 1
    assert messages[0].action is SocketAction.DATA
    assert len(messages[0].payload) == 0
    assert framer.state is FramerState.AWAIT_HEADER


def test_empty_payload_followed_by_package(framer, messages):
    framer.on_bytes(create_package(b"") + create_package(b"next"))

    assert payloads(messages) == [b"", b"next"]


def test_malformed_header_faults(framer, messages):
    framer.on_bytes(bytes.fromhex("41 42 43 44 01 00 05 00 00 00"))

    assert len(messages) == 1
    assert messages[0].action is SocketAction.ERROR
    assert messages[0].code == ERROR_CODE_PROTOCOL
    assert framer.state is FramerState.FAULTED
    assert framer.faulted

    # 以降のバイトは解析しない
    framer.on_bytes(create_package(b"hi!"))
    assert len(messages) == 1
    assert framer.queue.buffered_bytes == 0


def test_fault_discards_trailing_bytes_in_same_chunk(framer, messages):
    framer.on_bytes(create_package(b"ok") + create_package(b"", pkg_size=3) + create_package(b"lost"))

    assert [m.action for m in messages] == [SocketAction.DATA, SocketAction.ERROR]
    assert payloads(messages) == [b"ok"]
    assert framer.queue.buffered_bytes == 0


def test_max_pkg_size_cap(messages):
    framer = Framer(messages.append, max_pkg_size=16)

    framer.on_bytes(create_package(b"small"))
    framer.on_bytes(create_package(b"x" * 7))

    assert payloads(messages) == [b"small"]
    assert messages[-1].action is SocketAction.ERROR
    assert framer.faulted


def test_zero_copy_fast_path(framer, messages):
    """チャンクがちょうど1パッケージならペイロードは入力のビュー"""
    chunk = create_package(b"payload")

    framer.on_bytes(chunk)

    payload = messages[0].payload
    assert isinstance(payload, memoryview)
    assert payload.obj is chunk


def test_zero_copy_view_reflects_mutation(framer, messages):
    chunk = bytearray(create_package(b"abc"))

    framer.on_bytes(chunk)
    chunk[-1] = ord("z")

    assert bytes(messages[0].payload) == b"abz"


@pytest.mark.parametrize("seed", range(20))
def test_chunk_boundary_invariance(seed):
    """任意のチャンク分割でも同じペイロード列になる"""
    rng = random.Random(seed)
    originals = [bytes(rng.randrange(256) for _ in range(rng.randrange(0, 40))) for _ in range(rng.randrange(1, 12))]
    stream = b"".join(create_package(p) for p in originals)

    messages = []
    framer = Framer(messages.append)
    pos = 0
    while pos < len(stream):
        size = rng.randrange(1, 25)
        framer.on_bytes(stream[pos:pos + size])
        pos += size
        assert framer.queue.buffered_bytes == sum(len(c) for c in framer.queue.chunks)

    assert payloads(messages) == originals
    assert framer.state is FramerState.AWAIT_HEADER
    assert framer.queue.buffered_bytes == 0


def test_reentrant_sink_is_drained_in_order():
    """シンクから on_bytes を再入しても順序どおりに処理される"""
    states = []
    received = []
    pending = [create_package(b"second") + create_package(b"third")]

    def sink(message):
        states.append(framer.state)
        received.append(bytes(message.payload))
        if pending:
            framer.on_bytes(pending.pop())

    framer = Framer(sink)
    framer.on_bytes(create_package(b"first"))

    assert received == [b"first", b"second", b"third"]
    assert all(s is FramerState.BLOCKED for s in states)
    assert framer.state is FramerState.AWAIT_HEADER


def test_sink_exception_does_not_leave_blocked():
    def sink(message):
        raise RuntimeError("boom")

    framer = Framer(sink)
    with pytest.raises(RuntimeError):
        framer.on_bytes(create_package(b"x"))

    assert framer.state is FramerState.AWAIT_HEADER
    assert framer.payload_length == 0


def test_debug_logging(framer, messages, caplog):
    with patch("protocol.framer.config") as mock_config:
        mock_config.DEBUG_FRAME_PARSING = True
        with caplog.at_level("DEBUG", logger="protocol.framer"):
            framer.on_bytes(create_package(b"hi!")[:11])

    assert "Received 11 bytes" in caplog.text
    assert "Parsed header" in caplog.text
    assert "Waiting for payload" in caplog.text
