import logging

import uvicorn

from . import config


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    uvicorn.run("slideframe.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
