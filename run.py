#!/usr/bin/env python3
"""
Run script for the Scaffold server
"""
import uvicorn

from scaffold.config.settings import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "scaffold.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
