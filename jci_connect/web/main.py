"""
Web UI entrypoint - runs the FastAPI web server.
"""

import os
import logging
import uvicorn

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO")),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main():
    from jci_connect.web import web_app, init_web_app
    from jci_connect.agenda import init_agenda_generator
    from jci_connect.config import load_config
    from jci_connect.storage import create_store, init_store
    from jci_connect.zoom_client import init_zoom_client

    config = load_config()
    init_web_app(config)

    store = create_store(config.storage)
    store.initialize()
    init_store(store)
    init_zoom_client(config.zoom)
    init_agenda_generator(config.agent)

    host = config.web.host
    port = config.web.port

    logger.info(f"Starting JCI Connect on {host}:{port}")

    uvicorn.run(
        web_app,
        host=host,
        port=port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
