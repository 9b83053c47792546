"""Application entry point for the SaaS Kit server."""

from saaskit.app import App
from saaskit.config import Config
from saaskit.logging import setup_logging
from saaskit.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
