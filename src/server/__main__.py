"""Run the settlernote web API with ``python -m server``."""

import os

import uvicorn

from settlernote.config import SETTLERNOTE_AUTO_PROVISION_USERS, SETTLERNOTE_LOG_LEVEL, SETTLERNOTE_MEDIA_PATH
from settlernote.utils.logging_config import configure_logging, get_logger

configure_logging(SETTLERNOTE_LOG_LEVEL)
logger = get_logger(__name__)


def main() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    logger.info(
        "Starting settlernote server",
        extra={
            "host": host,
            "port": port,
            "media_path": str(SETTLERNOTE_MEDIA_PATH),
            "auto_provision_users": SETTLERNOTE_AUTO_PROVISION_USERS,
        },
    )

    # uvicorn would otherwise replace the handlers installed above
    uvicorn.run("server.main:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    main()
