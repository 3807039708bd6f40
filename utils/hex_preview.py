"""Helpers for logging raw byte chunks."""


def format_hex_preview(data, limit: int = 50) -> str:
    """
    バイト列をログ出力用の16進文字列に変換

    Args:
        data: bytes / bytearray / memoryview
        limit: 省略せずに出力する最大バイト数

    Returns:
        16進文字列。limit を超える場合は先頭 limit バイトと '...'
    """
    view = memoryview(data)
    if len(view) <= limit:
        return view.hex()
    return view[:limit].hex() + "..."
