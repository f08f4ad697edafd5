"""Server entry point: run the registry API under uvicorn."""

from __future__ import annotations

import os

from dotenv import load_dotenv


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Start the FastAPI server with uvicorn."""
    import uvicorn

    load_dotenv()
    resolved_host = host or os.getenv("REGISTRAR_HOST", "127.0.0.1")
    resolved_port = port or int(os.getenv("REGISTRAR_PORT", "8430"))

    uvicorn.run(
        "registrar.server.app:app",
        host=resolved_host,
        port=resolved_port,
        log_level="info",
    )
