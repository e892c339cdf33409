"""
MoodTune Main Application

Entry point that loads the environment and serves the FastAPI backend.
"""

import os

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from .api.backend import app  # noqa: E402


def main():
    """Main entry point for the application."""
    host = os.getenv("BACKEND_HOST", "127.0.0.1")
    port = int(os.getenv("BACKEND_PORT", "8000"))

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO").lower()
    )


if __name__ == "__main__":
    main()
