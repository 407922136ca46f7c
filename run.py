import uvicorn
from src.jangatub.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "src.jangatub.main:app",
        host="localhost",
        port=settings.SERVER_PORT,
        reload=settings.ENV == "development",
        log_level="info",
    )
