#!/usr/bin/env python3
"""
Script to start the FastAPI server for the Comax tools
"""
import os
import sys

import uvicorn
from dotenv import load_dotenv

from app.comax_client.config import get_comax_config
from app.comax_client.exceptions import ComaxConfigError


def main():
    load_dotenv()
    host = os.getenv("COMAX_API_HOST", "0.0.0.0")
    port = int(os.getenv("COMAX_API_PORT", "8000"))

    try:
        get_comax_config()
    except ComaxConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Starting Comax FastAPI server on {host}:{port}", file=sys.stderr)
    print(f"   Python: {sys.executable}", file=sys.stderr)

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=os.getenv("COMAX_LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
