# site_diff/server.py
"""
Static server for browsing the artifacts of a run.

``/`` lists screenshots of both instances, diffs and report files; the
three artifact directories and the reports are served as static files.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from aiohttp import web
from jinja2 import Environment

from site_diff.engine import DIFFS, REPORT_HTML, REPORT_JSON, REPORT_XML, SCREENSHOTS_A, SCREENSHOTS_B
from site_diff.report.html_report import template_env
from site_diff.utils import ensure_dir, list_files

__all__ = ["create_app", "serve", "DEFAULT_PORT"]

DEFAULT_PORT = 3003
UNKNOWN_URL = "Unknown URL"

ROOT_KEY = web.AppKey("root", Path)
ENV_KEY = web.AppKey("jinja_env", Environment)

_REPORT_LABELS = {
    REPORT_XML: "JUnit Report (XML)",
    REPORT_JSON: "Report (JSON)",
    REPORT_HTML: "Report (HTML)",
}

logger = logging.getLogger("SiteDiff")

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Error handling %s", request.path)
        return web.Response(status=500, text="Something broke!")


async def index(request: web.Request) -> web.Response:
    root: Path = request.app[ROOT_KEY]
    instance_a = request.query.get("instanceA") or os.environ.get("INSTANCE_A") or UNKNOWN_URL
    instance_b = request.query.get("instanceB") or os.environ.get("INSTANCE_B") or UNKNOWN_URL
    sections = [
        {"title": f"Screenshots Instance A - {instance_a}", "dir": SCREENSHOTS_A, "files": list_files(root / SCREENSHOTS_A)},
        {"title": f"Screenshots Instance B - {instance_b}", "dir": SCREENSHOTS_B, "files": list_files(root / SCREENSHOTS_B)},
        {"title": "Diffs", "dir": DIFFS, "files": list_files(root / DIFFS)},
    ]
    reports = [(name, label) for name, label in _REPORT_LABELS.items() if (root / name).is_file()]
    template = request.app[ENV_KEY].get_template("index.html.j2")
    html = template.render(sections=sections, reports=reports)
    return web.Response(text=html, content_type="text/html")


async def report_file(request: web.Request) -> web.FileResponse:
    name = request.match_info["name"]
    path = request.app[ROOT_KEY] / name
    if name not in _REPORT_LABELS or not path.is_file():
        raise web.HTTPNotFound()
    return web.FileResponse(path)


def create_app(root: Union[str, Path]) -> web.Application:
    """Application serving the run directory *root*."""
    root_path = Path(root).resolve()
    app = web.Application(middlewares=[error_middleware])
    app[ROOT_KEY] = root_path
    app[ENV_KEY] = template_env()
    app.router.add_get("/", index)
    app.router.add_get(r"/{name:report\.(xml|json|html)}", report_file)
    for directory in (SCREENSHOTS_A, SCREENSHOTS_B, DIFFS):
        # add_static needs an existing directory
        app.router.add_static(f"/{directory}/", ensure_dir(root_path / directory))
    return app


def serve(root: Union[str, Path], host: str = "0.0.0.0", port: Optional[int] = None) -> None:
    """Blocking server loop, port from *port*, ``$PORT`` or 3003."""
    port = port or int(os.environ.get("PORT", DEFAULT_PORT))
    logger.info("Server running at http://%s:%d (serving %s)", host, port, root)
    logger.info("Also available at http://localhost:%d", port)
    web.run_app(create_app(root), host=host, port=port, print=None)
