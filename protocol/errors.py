"""Exceptions raised by the packet stream client."""


class PacketStreamError(Exception):
    """パケットストリーム関連エラーの基底クラス"""
    pass


class NotReadyError(PacketStreamError):
    """接続が OPEN になる前に send が呼ばれた（リトライ可能）"""
    pass


class TransportError(PacketStreamError):
    """トランスポート層で非同期に発生したエラー"""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class ProtocolError(PacketStreamError, ValueError):
    """ヘッダーの pkg_size が不正（バイトストリームの同期が失われた）"""

    def __init__(self, message: str, pkg_size: int):
        super().__init__(message)
        self.pkg_size = pkg_size


class AlreadyConnectingError(PacketStreamError):
    """ハンドシェイク中に再度 connect が呼ばれた"""
    pass
