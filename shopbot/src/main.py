"""
Shopbot - Application Entry Point
==================================
Run with:
    uvicorn shopbot.src.main:app --host 0.0.0.0 --port 3001
    python -m shopbot.src.main            # HOST / PORT from settings
"""

import uvicorn

from shopbot.config.settings import settings
from shopbot.src.api.app import create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
