#!/usr/bin/env python3
"""
Mini Banking API Entry Point

Starts the FastAPI server using the host and port from configuration.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from mini_banking.api import run_server
from mini_banking.config import get_config
from mini_banking.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format)

    print("Starting Mini Banking API...")
    print(f"Storage backend: {config.storage_backend}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(debug=False)
    except KeyboardInterrupt:
        print("\nShutting down Mini Banking API...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
