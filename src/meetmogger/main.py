"""Application entry point for MeetMogger backend server."""

from meetmogger.app import App
from meetmogger.config import Config
from meetmogger.core.db import create_mongo_client
from meetmogger.logging import setup_logging
from meetmogger.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    mongo_client = create_mongo_client(config)
    app = App(config, mongo_client)
    run_server(app, config)


if __name__ == "__main__":
    main()
