import logging

from appointment_api.core import config

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s - %(message)s'


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or config.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # SQL echo is far too chatty below WARNING
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
