"""
Flowgraph API

Main application entry point for the Flowgraph API.
Serves GraphQL and REST views of the flow graph records loaded from DATA_PATH.
"""

import uvicorn

from flowgraph.config.app_config import get_settings


def run_server():
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        "flowgraph.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,  # Records live in process memory
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )


def main():
    """Main entry point for the application."""
    settings = get_settings()
    print(f"Starting {settings.APP_NAME} on http://{settings.HOST}:{settings.PORT}")
    print(f"  GraphQL: http://{settings.HOST}:{settings.PORT}{settings.GRAPHQL_PATH}")
    print(f"  REST:    http://{settings.HOST}:{settings.PORT}{settings.API_PREFIX}")
    run_server()


if __name__ == "__main__":
    main()
