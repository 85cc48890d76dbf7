"""Gemini Studio: dev launcher. Starts the API server in watch mode."""

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="Gemini Studio dev launcher")
    parser.add_argument("--log-level", default="info",
                        choices=["debug", "info", "warning", "error"],
                        help="Log level for the server (default: info)")
    parser.add_argument("--mcp", action="store_true",
                        help="Run the MCP server on stdio instead of the HTTP API")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    if not os.getenv("API_KEY"):
        print("Warning: API_KEY is not set; every game call will fail until it is.")

    if args.mcp:
        from backend.mcp_server import mcp
        mcp.run()
        return

    print(f"Starting backend on http://localhost:{PORT} ...")
    proc = subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "backend.app:app", "--reload",
         "--host", HOST, "--port", PORT, "--log-level", args.log_level],
        cwd=ROOT,
    )
    try:
        proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
        proc.terminate()
        proc.wait()


if __name__ == "__main__":
    main()
