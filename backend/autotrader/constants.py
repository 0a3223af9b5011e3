"""
Application Constants

Fixed values of the Bitvavo integration and the TradingView webhook.
"""

# Minimum order value accepted by Bitvavo, in EUR
MIN_EUR_AMOUNT = 5.0

# Only EUR-quoted markets are supported
QUOTE_CURRENCY = "EUR"

# Bitvavo signs the versioned path, e.g. "/v2/order"
BITVAVO_API_VERSION_PREFIX = "/v2"

# Header names required by the Bitvavo REST API
BITVAVO_ACCESS_KEY_HEADER = "Bitvavo-Access-Key"
BITVAVO_ACCESS_SIGNATURE_HEADER = "Bitvavo-Access-Signature"
BITVAVO_ACCESS_TIMESTAMP_HEADER = "Bitvavo-Access-Timestamp"
BITVAVO_ACCESS_WINDOW_HEADER = "Bitvavo-Access-Window"

# Replaces credential header values in request logs
REDACTED = "REDACTED"

# Published TradingView webhook source addresses
TRADINGVIEW_WEBHOOK_IPS = [
    "52.89.214.238",
    "34.212.75.30",
    "54.218.53.128",
    "52.32.178.7",
]

LOCALHOST_ADDRESSES = ("127.0.0.1", "::1", "0:0:0:0:0:0:0:1")

# Bot IDs are short, shareable identifiers used in TradingView alert bodies
BOT_ID_LENGTH = 6
BOT_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

# Webhook API keys: 32 random bytes, urlsafe base64 without padding
WEBHOOK_KEY_BYTES = 32

DRY_RUN_ORDER_PREFIX = "dry-run-"

# Order and position statuses
ORDER_STATUS_COMPLETED = "COMPLETED"
ORDER_STATUS_FAILED = "FAILED"
POSITION_STATUS_OPEN = "OPEN"
POSITION_STATUS_CLOSED = "CLOSED"

SUPPORTED_ACTIONS = ("buy", "sell")
