"""
Upward notifications produced by the framer and connection adapters.

Every notification is a SocketMessage with one of four actions:

- open:  the transport is connected
- data:  one framed package payload (bytes-like)
- error: {"message": str, "code": int}
- close: {"message": str, "code": int}, delivered once per connection

A sink is any callable taking a SocketMessage. QueueSink backs it with an
asyncio.Queue for consumers that prefer awaiting messages.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class SocketAction(str, Enum):
    OPEN = "open"
    DATA = "data"
    ERROR = "error"
    CLOSE = "close"


@dataclass(frozen=True)
class SocketMessage:
    action: SocketAction
    payload: Any = None

    @property
    def code(self) -> Optional[int]:
        """error / close 通知のコード（それ以外は None）"""
        if isinstance(self.payload, dict):
            return self.payload.get("code")
        return None


EventSink = Callable[[SocketMessage], None]


def open_message() -> SocketMessage:
    return SocketMessage(SocketAction.OPEN)


def data_message(payload) -> SocketMessage:
    return SocketMessage(SocketAction.DATA, payload)


def error_message(message: str, code: int) -> SocketMessage:
    return SocketMessage(SocketAction.ERROR, {"message": message, "code": code})


def close_message(message: str, code: int) -> SocketMessage:
    return SocketMessage(SocketAction.CLOSE, {"message": message, "code": code})


class QueueSink:
    """asyncio.Queue を使ったイベントシンク"""

    def __init__(self, maxsize: int = 0):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize)

    def __call__(self, message: SocketMessage) -> None:
        # シンクはフレーマーをブロックしない
        self.queue.put_nowait(message)

    async def get(self) -> SocketMessage:
        return await self.queue.get()

    def empty(self) -> bool:
        return self.queue.empty()
