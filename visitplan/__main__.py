"""Run the application with uvicorn: ``python -m visitplan``."""
import uvicorn

from visitplan.core.config import settings


def main():
    uvicorn.run("visitplan.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
