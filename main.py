"""
HSTL Recruitment Tracker - Main Entry Point
"""
from hstl_tracker.app import create_app
from hstl_tracker.config import config


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=config.server.host,
        port=config.server.port,
        reload=True
    )
