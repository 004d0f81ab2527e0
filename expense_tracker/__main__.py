"""Run the Expense Tracker API with uvicorn."""

import structlog
import uvicorn

from expense_tracker.api import create_app
from expense_tracker.config import get_settings


def main() -> None:
    """Serve the API on the configured host and port."""
    server = get_settings().server
    app = create_app()
    structlog.get_logger(__name__).info(
        "server_starting",
        url=f"http://localhost:{server.port}",
    )
    uvicorn.run(app, host=server.host, port=server.port)


if __name__ == "__main__":
    main()
