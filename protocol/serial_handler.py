"""Serial port transport for the packet stream client."""

import asyncio
import logging
from typing import Optional

import serial
import serial_asyncio

from config import config

from .connection import ConnectionAdapter, ReadyState
from .constants import CLOSE_CODE_ABNORMAL, CLOSE_CODE_NORMAL
from .events import EventSink

logger = logging.getLogger(__name__)


class SerialConnection(ConnectionAdapter, asyncio.Protocol):
    """
    シリアルポート接続アダプター

    connect(port, baudrate) でシリアルポートを開き、受信データを Framer に渡す。
    """

    def __init__(self, sink: EventSink, max_pkg_size: int = None):
        ConnectionAdapter.__init__(self, sink, max_pkg_size)
        self.transport = None
        self.port: Optional[str] = None
        self._connection_lost_future: Optional[asyncio.Future] = None
        self._close_task: Optional[asyncio.Task] = None

    async def connect(self, port: str = None, baudrate: int = None) -> None:
        """シリアルポートを開く（失敗は error / close 通知で報告）"""
        await self._release_previous_connection()

        self.port = port or config.SERIAL_PORT
        baudrate = baudrate or config.BAUD_RATE
        self._start_connection()
        self._close_task = None

        loop = asyncio.get_running_loop()
        self._connection_lost_future = loop.create_future()

        logger.info(f"Attempting to connect to {self.port} at {baudrate} baud...")
        try:
            transport, _ = await serial_asyncio.create_serial_connection(
                loop, lambda: self, self.port, baudrate=baudrate
            )
        except (serial.SerialException, OSError) as e:
            self._handle_error(e)
            self._handle_close(CLOSE_CODE_ABNORMAL)
            self._resolve_connection_lost()
            return
        self.transport = transport

    async def wait_closed(self) -> None:
        """プロトコルエラー後の close と connection_lost を待つ"""
        if self._close_task is not None:
            await asyncio.shield(self._close_task)
        if self._connection_lost_future is not None:
            await asyncio.shield(self._connection_lost_future)

    def connection_made(self, transport):
        """接続確立時の処理"""
        self.transport = transport
        try:
            transport.serial.dtr = True
            logger.info(f"Serial port {transport.serial.port} opened, DTR set.")
        except (AttributeError, IOError) as e:
            logger.warning(f"Could not set DTR on {self.port}: {e}")

        if self.ready_state is ReadyState.CLOSING:
            # 接続確立前に close() が呼ばれた
            transport.close()
            return
        self._handle_open()

    def data_received(self, data):
        """Called when data is received from the serial port."""
        if self.framer is None:
            return
        if not self._handle_bytes(data):
            self._close_task = asyncio.create_task(self._close_after_fault())

    def connection_lost(self, exc):
        """切断時の処理"""
        if exc is not None:
            self._handle_error(exc)
            code = CLOSE_CODE_ABNORMAL
        else:
            code = self._close_code or CLOSE_CODE_NORMAL
        self._handle_close(code)
        self.transport = None
        self._resolve_connection_lost()

    def _resolve_connection_lost(self) -> None:
        if self._connection_lost_future and not self._connection_lost_future.done():
            self._connection_lost_future.set_result(True)

    async def _send_frame(self, data) -> None:
        self.transport.write(data)

    async def _close_transport(self, code: int) -> None:
        if self.transport is not None:
            self.transport.close()
