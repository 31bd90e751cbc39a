"""FastAPI app: /, /health, /check, /check/project."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_cors_origins
from .routes import check_router, health_router, root_router
from .startup import validate_config

app = FastAPI(
    title="Editor Diagnostics API",
    description="Structural, property and scope diagnostics for HTML, CSS/SCSS and JavaScript.",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _validate_config() -> None:
    """Warn about unusable diagnostics settings in the environment."""
    validate_config()


app.include_router(root_router)
app.include_router(health_router)
app.include_router(check_router)
