SKU_PATTERN = r"^[A-Z0-9-]+$"

TRANSACTION_TYPES = ("IN", "OUT", "ADJUSTMENT")

HEALTH_DEFAULT_VALUE = "Service is healthy"

UNKNOWN_USER = "unknown"

# Substrings immudb puts in gRPC error details.
KEY_NOT_FOUND_MARKER = "key not found"
SESSION_NOT_FOUND_MARKER = "session not found"
