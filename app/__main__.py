# app/__main__.py
import logging

import uvicorn

from app.core.config import get_settings
from app.main import app

logger = logging.getLogger("app")


def main() -> None:
    settings = get_settings()
    logger.info("Server ready at: http://%s:%s/tickets", settings.HOST, settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
