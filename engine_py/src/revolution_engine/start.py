#!/usr/bin/env python3
"""Startup script for the Revolution game backend"""

import uvicorn

from .config import ServerConfig


def main():
    config = ServerConfig.from_env()

    print(f"🚀 Starting Revolution Game Backend on {config.host}:{config.port}")
    print(f"📍 Health check available at: http://{config.host}:{config.port}/health")

    uvicorn.run(
        "revolution_engine.main:app",
        host=config.host,
        port=config.port,
        reload=config.reload,
        log_level=config.log_level,
    )


if __name__ == "__main__":
    main()
