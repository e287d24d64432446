"""CLI entrypoint to run the ParlayBook FastAPI server."""

from __future__ import annotations

import os

import uvicorn

from parlaybook.config import configure_logging


def main() -> None:
    configure_logging()
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("parlaybook.api.server:create_app", factory=True, host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":  # pragma: no cover
    main()
