"""Run the registry under Granian."""

from granian import Granian
from granian.constants import Interfaces

from versionstack.config import settings


def main() -> None:
    Granian(
        "versionstack.main:app",
        address=settings.host,
        port=settings.port,
        interface=Interfaces.ASGI,
        log_access=True,
    ).serve()


if __name__ == "__main__":
    main()
