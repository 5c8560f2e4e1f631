import uvicorn

from warden.core.config import settings


def main() -> None:
    """Run the API with uvicorn using the configured host and port."""
    uvicorn.run(
        "warden.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
