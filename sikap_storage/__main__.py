import logging
import sys

import uvicorn
from dotenv import load_dotenv

from sikap_storage.config import load_settings
from sikap_storage.main import create_app

logger = logging.getLogger("sikap_storage")


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


def main() -> int:
    # A missing .env is fine; production sets real environment variables.
    load_dotenv()
    try:
        settings = load_settings()
    except RuntimeError as e:
        setup_logging("info")
        logger.critical("invalid configuration: %s", e)
        return 1

    setup_logging(settings.log_level)
    try:
        app = create_app(settings)
    except OSError as e:
        logger.critical("cannot prepare upload dir %s: %s", settings.upload_dir, e)
        return 1

    logger.info("listening on 0.0.0.0:%s", settings.port)
    logger.info("upload dir: %s", settings.upload_dir)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
