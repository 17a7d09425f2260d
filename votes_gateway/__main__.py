"""Run the gateway with uvicorn: ``python -m votes_gateway``."""

import uvicorn

from votes_gateway.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("votes_gateway.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
