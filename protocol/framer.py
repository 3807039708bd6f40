"""
Length-prefixed package framer

Reassembles an arbitrarily chunked byte stream into whole packages:

    proj_flag (4) | trans_layer_ver (2, LE) | pkg_size (4, LE) | payload

pkg_size includes the 10 byte header. Each payload is emitted to the sink as
a "data" notification, in order, exactly once.
"""

import logging
from enum import Enum
from typing import Optional

from config import config
from utils.hex_preview import format_hex_preview

from .byte_queue import ByteQueue
from .constants import HEADER_LENGTH, ERROR_CODE_PROTOCOL
from .errors import ProtocolError
from .events import EventSink, data_message, error_message
from .header_codec import HeaderCodec, PackageHeader

logger = logging.getLogger(__name__)


class FramerState(Enum):
    AWAIT_HEADER = "header"
    AWAIT_PAYLOAD = "payload"
    BLOCKED = "blocked"
    FAULTED = "faulted"


class Framer:
    """パッケージ分割（粘包処理）ステートマシン"""

    def __init__(self, sink: EventSink, max_pkg_size: int = 0):
        self.sink = sink
        self.max_pkg_size = max_pkg_size
        self.queue = ByteQueue()
        self.state = FramerState.AWAIT_HEADER
        self.payload_length = 0
        self.last_header: Optional[PackageHeader] = None

    @property
    def faulted(self) -> bool:
        return self.state is FramerState.FAULTED

    def on_bytes(self, buf) -> None:
        """トランスポートからチャンクを受信した時の処理"""
        if self.faulted:
            logger.debug(f"Framer faulted, discarding {len(buf)} bytes")
            return

        if config.DEBUG_FRAME_PARSING:
            logger.debug(f"Received {len(buf)} bytes: {format_hex_preview(buf)}")

        self.queue.append(buf)
        self.drain()

    def drain(self) -> None:
        """キューから取り出せる限りパッケージを処理"""
        readable = True
        while readable:
            if self.state is FramerState.AWAIT_HEADER:
                readable = self._read_header()
            elif self.state is FramerState.AWAIT_PAYLOAD:
                readable = self._read_payload()
            else:
                # BLOCKED（受け渡し中の再入）/ FAULTED
                readable = False

    def _read_header(self) -> bool:
        buffer = self.queue.take(HEADER_LENGTH)
        if buffer is None:
            return False

        self.state = FramerState.BLOCKED
        header = HeaderCodec.decode(buffer)
        try:
            HeaderCodec.validate_pkg_size(header, self.max_pkg_size)
        except ProtocolError as e:
            self._fault(e)
            return False

        self.last_header = header
        self.payload_length = header.payload_length
        self.state = FramerState.AWAIT_PAYLOAD

        if config.DEBUG_FRAME_PARSING:
            logger.debug(
                f"Parsed header: flag={header.tag!r}, ver={header.trans_layer_ver}, "
                f"pkg_size={header.pkg_size}, buffered={self.queue.buffered_bytes}"
            )
        return True

    def _read_payload(self) -> bool:
        if self.payload_length == 0:
            # 空ペイロードはキューを読まずに通知
            buffer = memoryview(b"")
        else:
            buffer = self.queue.take(self.payload_length)
            if buffer is None:
                if config.DEBUG_FRAME_PARSING:
                    logger.debug(
                        f"Waiting for payload: {self.queue.buffered_bytes} < {self.payload_length}"
                    )
                return False

        self.state = FramerState.BLOCKED
        try:
            self.sink(data_message(buffer))
        finally:
            self.payload_length = 0
            self.state = FramerState.AWAIT_HEADER
        return True

    def _fault(self, error: ProtocolError) -> None:
        """同期が失われたので以降のバイトは解析しない"""
        logger.error(f"Frame decode error: {error}")
        self.state = FramerState.FAULTED
        self.payload_length = 0
        self.queue.clear()
        self.sink(error_message(str(error), ERROR_CODE_PROTOCOL))
