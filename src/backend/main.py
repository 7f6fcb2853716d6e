"""
Vegobolt backend entry point.

Run with ``python main.py`` or ``uvicorn main:app``.
"""

from app import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    from core.config import settings

    # One process only: pump toggles are serialized by an in-process lock
    # and the MQTT bridge holds a single broker session.
    uvicorn.run(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
        workers=1,
        log_level=settings.logging.level.lower(),
        server_header=False,
    )
