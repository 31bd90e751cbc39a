"""Root route."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

_ROOT_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Editor Diagnostics API</title>
  <style>
    body { font-family: system-ui, sans-serif; max-width: 42rem; margin: 2rem auto; padding: 0 1rem; }
    h1 { font-size: 1.25rem; font-weight: 600; }
    ul { list-style: none; padding: 0; }
    li { margin: 0.5rem 0; }
    a { color: #2563eb; text-decoration: none; }
    a:hover { text-decoration: underline; }
    code { font-size: 0.875rem; }
    .meta { color: #64748b; font-size: 0.875rem; margin-top: 1.5rem; }
  </style>
</head>
<body>
  <h1>Editor Diagnostics API</h1>
  <p>Live diagnostics for HTML, CSS/SCSS and JavaScript buffers.</p>
  <ul>
    <li><code>POST /check</code>: one document, <code>{code, language, filename, options}</code></li>
    <li><code>POST /check/project</code>: <code>{html, css, js, options}</code></li>
    <li><a href="/health">/health</a>: liveness</li>
    <li><a href="/docs">/docs</a>: Swagger UI</li>
    <li><a href="/redoc">/redoc</a>: ReDoc</li>
  </ul>
  <p class="meta">Add <code>?format=text</code> to <code>POST /check</code> for a plain-text report.</p>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
def root() -> str:
    """Root: index page listing the endpoints."""
    return _ROOT_HTML
