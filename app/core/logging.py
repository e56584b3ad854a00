import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Keep SQL statement echo out of ledger debug output.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
