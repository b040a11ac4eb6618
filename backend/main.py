"""
RuleChart FastAPI application entrypoint.

Run with: uvicorn backend.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.database import Base, engine
from backend.models_db import RuleDocumentModel  # noqa: F401  (registers table)
from backend.routes import api_router
from backend.services.rules_service import RULES_DIR
from backend.utils.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create DB tables and rules dir, and configure logging on startup."""
    RULES_DIR.mkdir(parents=True, exist_ok=True)
    configure_logging()
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="RuleChart API",
    description="""Rule document to Mermaid flowchart translator.

Rule documents are YAML mappings of named conditions, each with a `Check`
function and `true` / `false` outcomes (`action`, `next`, `terminate`).

- `GET/POST/PUT /api/rules/{name}` store rule documents (YAML bodies)
- `GET /api/rules/{name}/mermaid` translates a stored rule
- `POST /api/translate` translates a YAML body without storing it
""",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for a local browser editor (Vite default port 5173)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
def root():
    return {"service": "RuleChart", "docs": "/docs", "api": "/api"}
