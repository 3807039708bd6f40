"""Application configuration settings."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """アプリケーション設定"""
    # WebSocket connection settings
    WS_HOST: str = os.environ.get("WS_HOST", "localhost")
    WS_PORT: int = int(os.environ.get("WS_PORT", "8080"))
    OPEN_TIMEOUT_S: float = float(os.environ.get("OPEN_TIMEOUT_S", "10"))

    # Serial communication settings
    SERIAL_PORT: str = os.environ.get("SERIAL_PORT", "/dev/ttyACM0")
    BAUD_RATE: int = int(os.environ.get("BAUD_RATE", "115200"))

    # 再接続までの待機時間（app.py の再接続ループで使用）
    RECONNECT_DELAY_S: float = float(os.environ.get("RECONNECT_DELAY_S", "5"))

    # パッケージサイズ上限（0 = 無制限）
    MAX_PKG_SIZE: int = int(os.environ.get("MAX_PKG_SIZE", "0"))

    # Debug settings
    DEBUG_FRAME_PARSING: bool = os.environ.get("DEBUG_FRAME_PARSING", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL


# Global configuration instance
config = Config()
