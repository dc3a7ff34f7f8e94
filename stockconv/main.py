import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockconv.api.routes.conversion import router as conversion_router
from stockconv.api.routes.inventory import router as inventory_router
from stockconv.core.config import settings
from stockconv.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(inventory_router)
app.include_router(conversion_router)
logger.info("%s ready", settings.app_name)


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}
