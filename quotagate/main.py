from quotagate.core.app_factory import create_app
from quotagate.core.config import settings

app = create_app(settings)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("quotagate.main:app", host=settings.app.host, port=settings.app.port)
