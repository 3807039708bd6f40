"""Package header parsing utilities."""

from dataclasses import dataclass

from .constants import HEADER_LENGTH, PROJ_FLAG_LENGTH, TRANS_LAYER_VER_LENGTH, PKG_SIZE_LENGTH
from .errors import ProtocolError


def read_uint_le(buf) -> int:
    """1/2/4 バイトのリトルエンディアン符号なし整数を読む"""
    width = len(buf)
    if width not in (1, 2, 4):
        raise ValueError(f"Unsupported integer width: {width}")
    return int.from_bytes(buf, byteorder="little", signed=False)


@dataclass(frozen=True)
class PackageHeader:
    proj_flag: bytes
    trans_layer_ver: int
    pkg_size: int

    @property
    def payload_length(self) -> int:
        return self.pkg_size - HEADER_LENGTH

    @property
    def tag(self) -> str:
        """proj_flag の ASCII 表現"""
        return self.proj_flag.decode("ascii", errors="replace")


class HeaderCodec:
    """パッケージヘッダー解析クラス"""

    @staticmethod
    def decode(buf) -> PackageHeader:
        """10バイトのヘッダーを解析（pkg_size の検証はしない）"""
        view = memoryview(buf)
        if len(view) != HEADER_LENGTH:
            raise ValueError(f"Header must be {HEADER_LENGTH} bytes, got {len(view)}")

        ver_pos = PROJ_FLAG_LENGTH
        size_pos = ver_pos + TRANS_LAYER_VER_LENGTH

        proj_flag = bytes(view[:PROJ_FLAG_LENGTH])
        trans_layer_ver = read_uint_le(view[ver_pos:size_pos])
        pkg_size = read_uint_le(view[size_pos:size_pos + PKG_SIZE_LENGTH])

        return PackageHeader(proj_flag, trans_layer_ver, pkg_size)

    @staticmethod
    def validate_pkg_size(header: PackageHeader, max_pkg_size: int = 0) -> bool:
        """pkg_size の検証（max_pkg_size = 0 なら上限なし）"""
        if header.pkg_size < HEADER_LENGTH:
            raise ProtocolError(
                f"Invalid pkg_size {header.pkg_size}: smaller than header length {HEADER_LENGTH}",
                header.pkg_size,
            )
        if max_pkg_size and header.pkg_size > max_pkg_size:
            raise ProtocolError(
                f"Invalid pkg_size {header.pkg_size}: exceeds maximum {max_pkg_size}",
                header.pkg_size,
            )
        return True


decode_header = HeaderCodec.decode
