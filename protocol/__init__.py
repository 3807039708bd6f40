"""Protocol module for package framing."""

from .constants import (
    PROJ_FLAG_LENGTH, TRANS_LAYER_VER_LENGTH, PKG_SIZE_LENGTH, HEADER_LENGTH,
    ERROR_CODE_TRANSPORT, ERROR_CODE_PROTOCOL,
    CLOSE_CODE_NORMAL, CLOSE_CODE_PROTOCOL_ERROR, CLOSE_CODE_ABNORMAL
)
from .errors import PacketStreamError, NotReadyError, TransportError, ProtocolError, AlreadyConnectingError
from .events import (
    SocketAction, SocketMessage, EventSink, QueueSink,
    open_message, data_message, error_message, close_message
)
from .byte_queue import ByteQueue
from .header_codec import HeaderCodec, PackageHeader, decode_header, read_uint_le
from .framer import Framer, FramerState
from .connection import ConnectionAdapter, ReadyState
from .websocket_handler import WebSocketConnection
from .serial_handler import SerialConnection

__all__ = [
    "PROJ_FLAG_LENGTH", "TRANS_LAYER_VER_LENGTH", "PKG_SIZE_LENGTH", "HEADER_LENGTH",
    "ERROR_CODE_TRANSPORT", "ERROR_CODE_PROTOCOL",
    "CLOSE_CODE_NORMAL", "CLOSE_CODE_PROTOCOL_ERROR", "CLOSE_CODE_ABNORMAL",
    "PacketStreamError", "NotReadyError", "TransportError", "ProtocolError", "AlreadyConnectingError",
    "SocketAction", "SocketMessage", "EventSink", "QueueSink",
    "open_message", "data_message", "error_message", "close_message",
    "ByteQueue", "HeaderCodec", "PackageHeader", "decode_header", "read_uint_le",
    "Framer", "FramerState", "ConnectionAdapter", "ReadyState",
    "WebSocketConnection", "SerialConnection"
]
