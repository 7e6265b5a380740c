# backend/app/main.py

import logging

from fastapi import FastAPI

from .config import settings
from .redis_client import redis_client
from .routers import discounts

logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Hotel Discounts API")

app.include_router(discounts.router)


@app.get("/health")
def health():
    return {"redis": redis_client.ping()}
