import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Calling it again only changes the level.
    """
    logger = logging.getLogger('rule_discovery')
    logger.setLevel(level)
    if not any(getattr(h, '_rule_discovery', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._rule_discovery = True
        logger.addHandler(handler)
    return logger
