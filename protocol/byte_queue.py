"""Queue of received byte chunks with exact-length extraction."""

from collections import deque
from typing import Deque, Optional


class ByteQueue:
    """
    受信チャンクのキュー

    チャンクは memoryview として保持し、take() はできる限りコピーせずに
    先頭から n バイトを切り出す。
    """

    def __init__(self):
        self.chunks: Deque[memoryview] = deque()
        self.buffered_bytes = 0

    def __len__(self) -> int:
        return self.buffered_bytes

    def append(self, buf) -> None:
        """チャンクを末尾に追加（検証なし）"""
        view = memoryview(buf)
        self.chunks.append(view)
        self.buffered_bytes += len(view)

    def has_at_least(self, n: int) -> bool:
        return self.buffered_bytes >= n

    def take(self, n: int) -> Optional[memoryview]:
        """
        先頭から n バイトを取り出す

        Args:
            n: 取り出すバイト数

        Returns:
            長さ n の memoryview。バッファ済みバイト数が足りない場合は None
            （状態は変更しない）
        """
        if not self.has_at_least(n):
            return None
        if n == 0:
            return memoryview(b"")

        self.buffered_bytes -= n
        head = self.chunks[0]

        # 先頭チャンクとちょうど同じ長さ: そのまま返す
        if n == len(head):
            return self.chunks.popleft()

        # 先頭チャンクの一部: 前半のビューを返し、後半を残す
        if n < len(head):
            self.chunks[0] = head[n:]
            return head[:n]

        # 複数チャンクにまたがる: 新しいバッファにコピー
        result = bytearray(n)
        offset = 0
        while offset < n:
            head = self.chunks[0]
            remaining = n - offset
            if len(head) <= remaining:
                result[offset:offset + len(head)] = head
                offset += len(head)
                self.chunks.popleft()
            else:
                result[offset:n] = head[:remaining]
                self.chunks[0] = head[remaining:]
                offset = n
        return memoryview(result)

    def clear(self) -> None:
        self.chunks.clear()
        self.buffered_bytes = 0
