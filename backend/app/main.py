from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.v1.api import api_router
from backend.app.core.config import settings
from backend.app.core.logging import setup_logging
from backend.app.middleware.request_id import RequestIDMiddleware

setup_logging()

app = FastAPI(title="Cash Ledger & Daybook")

# ─── CORS, restricted to configured origins ──────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Accept", "X-Admin-Pin", "X-Price-Pin", "X-Request-ID"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)

# ─── Custom middleware (outermost executes first) ─────────────────────────────
app.add_middleware(RequestIDMiddleware)

app.include_router(api_router)
