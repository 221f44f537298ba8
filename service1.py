import uvicorn

from main import create_app
from settings import get_settings

SERVICE_NAME = "skaffold-jib-demo"
app = create_app(SERVICE_NAME)


def run():
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
