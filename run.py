#!/usr/bin/env python3
"""
AMC Receipt Service
Main execution script - starts the API server with uvicorn
"""

import logging
import os

import uvicorn

from amc_receipts.main import create_app

logger = logging.getLogger("amc_receipts.run")


def main():
    """Main entry point for the AMC receipt service"""
    port_env = os.environ.get("PORT")
    port = 8000
    if port_env:
        try:
            port = int(port_env)
        except ValueError:
            logger.warning("Invalid PORT value: %s, using default 8000", port_env)

    app = create_app()
    logger.info("API documentation: http://localhost:%d/docs", port)

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=True,
        log_level=os.getenv("AMC_LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
