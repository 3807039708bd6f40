"""WebSocket transport for the packet stream client."""

import asyncio
import logging
from typing import Optional

import websockets
from websockets.exceptions import WebSocketException

from config import config

from .connection import ConnectionAdapter, ReadyState
from .constants import CLOSE_CODE_ABNORMAL, CLOSE_CODE_NORMAL
from .events import EventSink

logger = logging.getLogger(__name__)


class WebSocketConnection(ConnectionAdapter):
    """
    WebSocket 接続アダプター

    バイナリフレームを受信するたびに Framer に渡す。受信はリーダータスクで行い、
    接続終了時に close 通知を1回だけ出す。
    """

    def __init__(self, sink: EventSink, max_pkg_size: int = None, open_timeout: float = None):
        super().__init__(sink, max_pkg_size)
        self.open_timeout = config.OPEN_TIMEOUT_S if open_timeout is None else open_timeout
        self.uri: Optional[str] = None
        self._ws = None
        self._reader_task: Optional[asyncio.Task] = None

    async def connect(self, host: str = None, port: int = None) -> None:
        """サーバーに接続（失敗は error / close 通知で報告）"""
        await self._release_previous_connection()

        host = host or config.WS_HOST
        port = port or config.WS_PORT
        self.uri = f"ws://{host}:{port}"
        self._start_connection()
        self._ws = None

        logger.info(f"Connecting to {self.uri} ...")
        try:
            # 上限は Framer 側 (max_pkg_size) で管理するので websockets の制限は外す
            ws = await websockets.connect(self.uri, open_timeout=self.open_timeout, max_size=None)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self._handle_error(e)
            self._handle_close(CLOSE_CODE_ABNORMAL)
            return

        self._ws = ws
        if self.ready_state is ReadyState.CLOSING:
            # ハンドシェイク中に close() が呼ばれた
            await ws.close(code=self._close_code or CLOSE_CODE_NORMAL)
            self._handle_close(self._close_code or CLOSE_CODE_NORMAL)
            return

        self._handle_open()
        self._reader_task = asyncio.create_task(self._read_loop(ws))

    async def wait_closed(self) -> None:
        """リーダータスクの終了を待つ"""
        if self._reader_task is not None:
            await asyncio.shield(self._reader_task)

    async def _read_loop(self, ws) -> None:
        try:
            async for message in ws:
                if not self._handle_bytes(message):
                    await self._close_after_fault()
                    break
        except WebSocketException as e:
            self._handle_error(e)
        finally:
            code = self._close_code or ws.close_code or CLOSE_CODE_ABNORMAL
            self._handle_close(code, ws.close_reason or "")

    async def _send_frame(self, data) -> None:
        await self._ws.send(data)

    async def _close_transport(self, code: int) -> None:
        if self._ws is None:
            # まだハンドシェイク中: connect() 側で閉じる
            return
        await self._ws.close(code=code)
