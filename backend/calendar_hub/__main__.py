import uvicorn

from .config import Settings


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run("calendar_hub.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
