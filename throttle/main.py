import uvicorn

from throttle.core.app_factory import create_app

app = create_app()


def run() -> None:
    """Serve the module-level app with uvicorn (``throttle-api`` console script)."""
    uvicorn.run("throttle.main:app", host="0.0.0.0", port=8000, log_config=None)
