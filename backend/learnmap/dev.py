"""Development server entry point."""
import sys
import uvicorn

from learnmap.config import settings


def main():
    """Run the development server; auto-reload outside production."""
    uvicorn.run(
        "learnmap.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.app_env != "production",
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    sys.exit(main())
