import uvicorn

from insight_pulse.config import settings


def main() -> None:
    uvicorn.run("insight_pulse.main:app", host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
