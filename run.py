#!/usr/bin/env python3
"""
Retail Banking API Entry Point

Starts the FastAPI server using the BANK_* environment configuration.
"""

import sys

from retail_banking.api import run_server
from retail_banking.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("🏦 Starting Retail Banking API...")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\n👋 Shutting down Retail Banking API...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
