"""
Packet Stream Client Application

Connects to a WebSocket server (or a serial port) delivering length-prefixed
packages and logs every notification the framer produces:

- open / close / error lifecycle notifications
- one data notification per reassembled package

Reconnects after RECONNECT_DELAY_S when the connection closes, unless --once
is given.
"""

import argparse
import asyncio

from config import config
from protocol import QueueSink, SerialConnection, SocketAction, WebSocketConnection
from utils import format_hex_preview, setup_logging

# Setup logging
logger = setup_logging()


async def consume_messages(sink: QueueSink) -> int:
    """close 通知までメッセージを処理し、受信パッケージ数を返す"""
    packages = 0
    while True:
        message = await sink.get()

        if message.action is SocketAction.OPEN:
            logger.info("Connection established.")

        elif message.action is SocketAction.DATA:
            packages += 1
            logger.info(
                f"Package #{packages} {len(message.payload)} bytes: "
                f"{format_hex_preview(message.payload, limit=32)}"
            )

        elif message.action is SocketAction.ERROR:
            logger.error(f"Connection error ({message.code}): {message.payload['message']}")

        elif message.action is SocketAction.CLOSE:
            logger.info(f"Connection closed ({message.code}): {message.payload['message']}")
            return packages


async def run_client(args) -> None:
    """メインの受信処理関数"""
    logger.info("Starting Packet Stream Client")

    while True:  # 再接続ループ
        sink = QueueSink()
        if args.serial:
            connection = SerialConnection(sink)
            connect = connection.connect(args.serial, args.baud)
        else:
            connection = WebSocketConnection(sink)
            connect = connection.connect(args.host, args.port)

        try:
            await connect
            packages = await consume_messages(sink)
            logger.info(f"Received {packages} packages on this connection.")

        except asyncio.CancelledError:
            logger.info("Client task cancelled.")
            await connection.close()
            raise

        if args.once:
            break

        logger.info(f"Waiting {config.RECONNECT_DELAY_S} seconds before reconnecting...")
        await asyncio.sleep(config.RECONNECT_DELAY_S)

    logger.info("Packet stream client finished.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Receive length-prefixed packages over WebSocket or serial.")
    parser.add_argument(
        "--host", default=config.WS_HOST,
        help=f"WebSocket host (default: {config.WS_HOST})"
    )
    parser.add_argument(
        "--port", type=int, default=config.WS_PORT,
        help=f"WebSocket port (default: {config.WS_PORT})"
    )
    parser.add_argument(
        "-s", "--serial", default=None,
        help="Read from this serial port instead of WebSocket"
    )
    parser.add_argument(
        "-b", "--baud", type=int, default=config.BAUD_RATE,
        help=f"Baud rate (default: {config.BAUD_RATE})"
    )
    parser.add_argument(
        "--once", action="store_true",
        help="Exit when the connection closes instead of reconnecting"
    )
    return parser


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run_client(args))
    except KeyboardInterrupt:
        logger.info("Exiting due to KeyboardInterrupt.")


if __name__ == "__main__":
    main()
