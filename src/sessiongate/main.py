"""Application entry point for the SessionGate HTTP adapter."""

from sessiongate.app import App
from sessiongate.config import Config
from sessiongate.logging import setup_logging
from sessiongate.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
