import logging
from typing import Optional

from fastapi import FastAPI

from github_tools.api.routes import router
from github_tools.extension import GitHubToolsExtension

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def create_app(extension: Optional[GitHubToolsExtension] = None) -> FastAPI:
    app = FastAPI(title="GitHub Tools")
    # One extension per process: its config is what every block call reads
    app.state.extension = extension or GitHubToolsExtension()

    # Include all routes from the api module
    app.include_router(router)
    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
