import logging


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(app):
    """Configure the root logger for the application.

    DEBUG when the app runs in debug mode, otherwise the level named by
    ``LOG_LEVEL``.
    """
    level_name = 'DEBUG' if app.debug else app.config.get('LOG_LEVEL', 'INFO')
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)

    logger = logging.getLogger('gympro')
    logger.setLevel(level)
    return logger
