from __future__ import annotations

import logging

from fastapi import FastAPI

from marketdesk.api.routes import router
from marketdesk.config.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="marketdesk")
app.include_router(router)
