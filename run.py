#!/usr/bin/env python3
"""
Run script for the Memoir Audio Backend
"""
import uvicorn

from memoir_audio.config.settings import settings
from memoir_audio.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
