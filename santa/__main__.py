from __future__ import annotations

import logging
import os
import sys

from . import create_app
from .errors import StartupError

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger("santa")


def main() -> int:
    try:
        app = create_app()
    except StartupError as e:
        logger.error(e.message)
        return 1

    host = os.environ.get("SANTA_HOST", "127.0.0.1")
    port = int(os.environ.get("SANTA_PORT", "3000"))
    logger.info("Server running at http://%s:%d", host, port)
    app.run(host=host, port=port, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
