import uvicorn

from dating_api.config import load_settings

if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run("dating_api.main:app", host=settings.host, port=settings.port)
