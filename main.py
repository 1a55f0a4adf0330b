import uvicorn

from app.platform.config import settings


def main() -> None:
    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
