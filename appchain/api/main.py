"""FastAPI application for the appchain development node.

The node runs one in-process chain. Blocks are produced on demand via
POST /blocks rather than on a timer.
"""

import os

import uvicorn
from fastapi import Depends, FastAPI

from appchain.api.endpoints import get_chain, router
from appchain.log import configure_logging
from appchain.models.api import HealthResponse
from appchain.runtime import AppChain, set_default_chain

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("APPCHAIN_HOST", "127.0.0.1")
PORT = int(os.environ.get("APPCHAIN_PORT", "8000"))
DEBUG = os.environ.get("APPCHAIN_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("APPCHAIN_LOG_LEVEL", "INFO")
START_HEIGHT = int(os.environ.get("APPCHAIN_START_HEIGHT", "0"))

set_default_chain(AppChain(start_height=START_HEIGHT))

app = FastAPI(
    title="LBP Appchain (Python)",
    description="Development node for the LBP / XYK appchain runtime",
    version="0.1.0",
)

app.include_router(router)


@app.get("/health")
def health(chain: AppChain = Depends(get_chain)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", height=chain.height)


def run() -> None:
    """Run the development node.

    Configuration via environment variables:
    - APPCHAIN_HOST: Host to bind to (default: 127.0.0.1)
    - APPCHAIN_PORT: Port to bind to (default: 8000)
    - APPCHAIN_DEBUG: Enable debug/reload mode (default: false)
    - APPCHAIN_LOG_LEVEL: Log level (default: INFO)
    - APPCHAIN_START_HEIGHT: Height of the first block (default: 0)
    """
    configure_logging(LOG_LEVEL)
    uvicorn.run(
        "appchain.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
