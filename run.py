import uvicorn
from src.subnft.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "src.subnft.main:app",
        host="localhost",
        port=settings.SERVER_PORT,
        reload=True,
        log_level="info",
    )
