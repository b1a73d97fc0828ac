import uvicorn
from constants import HOST, LOG_FILE, LOG_LEVEL, PORT, SSL_CA_CERTS, SSL_CERTFILE, SSL_KEYFILE
from logging_config import setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app
from logging_config import get_logger

logger = get_logger(__name__)

if __name__ == "__main__":
    ssl_options = {}
    if SSL_KEYFILE and SSL_CERTFILE:
        ssl_options = {"ssl_keyfile": SSL_KEYFILE, "ssl_certfile": SSL_CERTFILE}
        if SSL_CA_CERTS:
            ssl_options["ssl_ca_certs"] = SSL_CA_CERTS
    scheme = "wss" if ssl_options else "ws"
    logger.info(f"Starting signaling server on {HOST}:{PORT}")
    logger.info(f"WebSocket URL: {scheme}://{HOST}:{PORT}/ws")
    uvicorn.run(app, host=HOST, port=PORT, ws_per_message_deflate=False, **ssl_options)
