"""Run the StraightPool API server with the configured host and port."""

import logging

import uvicorn

from .config import load_config


def main() -> None:
    cfg = load_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Database: %s", cfg.database_url)
    uvicorn.run("straightpool.api.main:app", host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
