"""
Run the API server.

Usage:
  python -m shop_api
"""
import uvicorn

from . import config


def main():
    state = config.state
    uvicorn.run(
        "shop_api.main:app",
        host=state.host,
        port=state.port,
        log_level=state.log_level.lower(),
        # in-flight requests get this long to finish after SIGTERM/SIGINT
        timeout_graceful_shutdown=state.shutdown_timeout,
    )


if __name__ == "__main__":
    main()
