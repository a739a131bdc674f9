import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings) -> None:
    logging.basicConfig(level=settings.log_level_value, format=LOG_FORMAT)
    # uvicorn's own access log duplicates the request log middleware
    if settings.ENABLE_LOGGING:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
