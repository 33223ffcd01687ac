"""
main.py — Server launcher and entry point.

Run this file to load the venue catalog and start the allocation API:

    python main.py

The operator dashboard is a separate Streamlit process:

    streamlit run dashboard/app.py

This file does NOT contain application logic. See app.py for the FastAPI
application, service wiring, and startup sequence.
"""

from __future__ import annotations

import uvicorn

from app import app, load_catalog_or_exit


HOST = "127.0.0.1"
PORT = 8000


def main() -> None:
    """Load the catalog (exiting on failure), then serve the API."""
    print("=" * 60)
    print("  Event Allocator")
    print("=" * 60)
    print(f"  Server  : http://{HOST}:{PORT}")
    print(f"  API docs: http://{HOST}:{PORT}/docs")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    # Fail before binding the port if the catalog is unusable.
    load_catalog_or_exit(app)

    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        log_level="info",
    )


if __name__ == "__main__":
    main()
