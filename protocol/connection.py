"""
Connection adapter base class

Binds a Framer to a concrete transport and turns transport events into
SocketMessage notifications:

    open   -> {"action": "open"}
    bytes  -> Framer.on_bytes -> {"action": "data", "payload": ...}
    error  -> {"action": "error", "payload": {"message", "code"}}
    closed -> {"action": "close", "payload": {"message", "code"}}  (once)

A new Framer is created on every connect(); nothing carries over between
connections. Reconnecting is left to the caller.
"""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Optional

from config import config

from .constants import (
    CLOSE_CODE_NORMAL, CLOSE_CODE_PROTOCOL_ERROR, ERROR_CODE_TRANSPORT,
    MESSAGE_CLOSED, MESSAGE_TRANSPORT_ERROR
)
from .errors import AlreadyConnectingError, NotReadyError, TransportError
from .events import EventSink, SocketMessage, close_message, error_message, open_message
from .framer import Framer

logger = logging.getLogger(__name__)


class ReadyState(IntEnum):
    """WebSocket.readyState と同じ値"""
    CONNECTING = 0
    OPEN = 1
    CLOSING = 2
    CLOSED = 3


class ConnectionAdapter(ABC):
    """Framer とトランスポートを結びつける基底クラス"""

    def __init__(self, sink: EventSink, max_pkg_size: int = None):
        self.sink = sink
        self.max_pkg_size = config.MAX_PKG_SIZE if max_pkg_size is None else max_pkg_size
        self.framer: Optional[Framer] = None
        self.ready_state = ReadyState.CLOSED
        self.last_error: Optional[TransportError] = None
        self._close_code: Optional[int] = None
        self._close_emitted = True

    @abstractmethod
    async def connect(self, host, port) -> None:
        raise NotImplementedError

    @abstractmethod
    async def _send_frame(self, data) -> None:
        """1フレームとしてトランスポートに書き込む"""
        raise NotImplementedError

    @abstractmethod
    async def _close_transport(self, code: int) -> None:
        raise NotImplementedError

    async def send(self, data) -> None:
        """データ送信（OPEN でなければ NotReadyError、バッファリングはしない）"""
        if self.ready_state is not ReadyState.OPEN:
            raise NotReadyError(f"Socket is not ready (state: {self.ready_state.name})")
        await self._send_frame(data)

    async def close(self, code: int = CLOSE_CODE_NORMAL) -> None:
        """接続を閉じる（CONNECTING / OPEN 以外では何もしない）"""
        logger.debug(f"Socket state: {self.ready_state.name}")
        if self.ready_state not in (ReadyState.CONNECTING, ReadyState.OPEN):
            return
        logger.info("Closing socket connection ...")
        self.ready_state = ReadyState.CLOSING
        self._close_code = code
        await self._close_transport(code)

    @abstractmethod
    async def wait_closed(self) -> None:
        raise NotImplementedError

    async def _release_previous_connection(self) -> None:
        """接続中なら拒否し、OPEN なら閉じてから再接続する"""
        if self.ready_state is ReadyState.CONNECTING:
            raise AlreadyConnectingError("connect() is already in progress")
        if self.ready_state in (ReadyState.OPEN, ReadyState.CLOSING):
            logger.warning("Already connected, closing previous connection")
            await self.close()
            await self.wait_closed()

    def _start_connection(self) -> None:
        """接続ごとに新しい Framer を用意"""
        self.framer = Framer(self._emit, self.max_pkg_size)
        self.ready_state = ReadyState.CONNECTING
        self.last_error = None
        self._close_code = None
        self._close_emitted = False

    def _emit(self, message: SocketMessage) -> None:
        try:
            self.sink(message)
        except Exception:
            logger.exception(f"Event sink failed while handling '{message.action.value}'")

    def _handle_open(self) -> None:
        if self.ready_state is ReadyState.CONNECTING:
            self.ready_state = ReadyState.OPEN
        logger.info("Socket connection opened")
        self._emit(open_message())

    def _handle_bytes(self, data) -> bool:
        """
        受信チャンクを Framer に渡す

        Returns:
            プロトコルエラーでフレーマーが停止した場合は False
        """
        if isinstance(data, str):
            logger.warning("Received text frame, encoding as UTF-8")
            data = data.encode("utf-8")
        elif isinstance(data, bytearray):
            data = bytes(data)

        self.framer.on_bytes(data)
        return not self.framer.faulted

    async def _close_after_fault(self) -> None:
        logger.warning("Closing connection after protocol error")
        await self.close(CLOSE_CODE_PROTOCOL_ERROR)

    def _handle_error(self, error: Exception) -> None:
        """トランスポートエラー（接続は閉じない、close は別途届く）"""
        if not isinstance(error, TransportError):
            error = TransportError(str(error) or type(error).__name__, error)
        self.last_error = error
        logger.error(f"Socket error: {error}")
        self._emit(error_message(MESSAGE_TRANSPORT_ERROR, ERROR_CODE_TRANSPORT))

    def _handle_close(self, code: int, reason: str = "") -> None:
        if self._close_emitted:
            return
        self._close_emitted = True
        self.ready_state = ReadyState.CLOSED
        self.framer = None
        logger.info(f"Socket connection closed (code: {code})")
        self._emit(close_message(reason or MESSAGE_CLOSED, code))
