"""Application entry point for the purchase OCR API server."""

import uvicorn

from purchase_ocr.api.app import app
from purchase_ocr.utils.config import load_config
from purchase_ocr.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server on the configured host/port."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
