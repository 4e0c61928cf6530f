"""Run the API with uvicorn: ``python -m tweet_video_api``."""

import uvicorn

from tweet_video_api.config.settings import settings


def main() -> None:
    uvicorn.run(
        "tweet_video_api.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    main()
