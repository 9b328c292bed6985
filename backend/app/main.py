import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api.errors import setup_exception_handlers
from app.api.routes.users import router as users_router

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI()

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(users_router)
