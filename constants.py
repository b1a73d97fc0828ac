import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

SERVER_NAME = os.getenv("SERVER_NAME", "WeClash Signaling Server")

# Room codes are opaque, fixed-length tokens
ROOM_CODE_LENGTH = 6

SWEEP_INTERVAL_SEC = float(os.getenv("SWEEP_INTERVAL_SEC", 30))
STATS_LOG_INTERVAL_SEC = float(os.getenv("STATS_LOG_INTERVAL_SEC", 300))

SSL_KEYFILE = os.getenv("SSL_KEYFILE", None)
SSL_CERTFILE = os.getenv("SSL_CERTFILE", None)
SSL_CA_CERTS = os.getenv("SSL_CA_CERTS", None)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
