"""Protocol constants for package framing."""

# Header field sizes
PROJ_FLAG_LENGTH = 4
TRANS_LAYER_VER_LENGTH = 2
PKG_SIZE_LENGTH = 4

# Calculated header length (pkg_size には このヘッダー長も含まれる)
HEADER_LENGTH = PROJ_FLAG_LENGTH + TRANS_LAYER_VER_LENGTH + PKG_SIZE_LENGTH

# Notification codes
ERROR_CODE_TRANSPORT = 666
ERROR_CODE_PROTOCOL = 667

# Close codes (RFC 6455)
CLOSE_CODE_NORMAL = 1000
CLOSE_CODE_PROTOCOL_ERROR = 1002
CLOSE_CODE_ABNORMAL = 1006

# Notification messages
MESSAGE_TRANSPORT_ERROR = "Connection error, please try reconnecting."
MESSAGE_CLOSED = "Connection closed, please try reconnecting."
