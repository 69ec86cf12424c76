"""Run the RouteLens service: python -m routelens"""

import uvicorn

from routelens.config import settings


def main() -> None:
    uvicorn.run(
        "routelens.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
