import logging
import sys

import uvicorn

from roomrent.config import config


def main():
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stdout,
    )

    logging.info(f"Starting API on {config.API_HOST}:{config.API_PORT}...")
    uvicorn.run("roomrent.api.app:app", host=config.API_HOST, port=config.API_PORT, log_config=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logging.info("Stopped")
