"""TermPaint FastAPI server: ANSI terminal text to styled runs."""

from __future__ import annotations

import hashlib
import logging
import os
import socket
import time
from datetime import datetime, timezone
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict

from ansi_parser import merge_runs, parse_text, split_lines
from html_render import runs_to_html

logger = logging.getLogger(__name__)

app = FastAPI(title="TermPaint", version="1.0.0")
_security = HTTPBearer()

TOKEN = os.environ.get("TERMPAINT_TOKEN", "changeme")
MAX_CHARS = int(os.environ.get("TERMPAINT_MAX_CHARS", "200000"))
RATE_LIMIT = int(os.environ.get("TERMPAINT_RATE_LIMIT", "20"))
LOG_LEVEL = os.environ.get("TERMPAINT_LOG_LEVEL", "INFO").upper()
HOST = os.environ.get("TERMPAINT_HOST", "127.0.0.1")
PORT = int(os.environ.get("TERMPAINT_PORT", "8787"))

if TOKEN == "changeme":
    import sys

    print(
        "\n\033[1;31mFATAL: TERMPAINT_TOKEN is set to 'changeme'.\033[0m\n"
        "Generate a secure token:  python3 -c \"import secrets; print(secrets.token_urlsafe(32))\"\n"
        "Then set it:  export TERMPAINT_TOKEN=<your-token>\n",
        file=sys.stderr,
    )
    sys.exit(1)


def _verify(creds: HTTPAuthorizationCredentials = Depends(_security)) -> str:
    if creds.credentials != TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")
    return creds.credentials


class HtmlRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    shorthand: bool = False


class RenderRequest(HtmlRequest):
    format: Literal["runs", "lines"] = "lines"


class _RateLimiter:
    """Simple in-memory sliding-window rate limiter."""

    def __init__(self, max_per_sec: int = 20):
        self._max = max_per_sec
        self._timestamps: list[float] = []

    def check(self) -> None:
        now = time.monotonic()
        self._timestamps = [t for t in self._timestamps if now - t < 1.0]
        if len(self._timestamps) >= self._max:
            raise HTTPException(status_code=429, detail="Rate limit exceeded")
        self._timestamps.append(now)


_render_limiter = _RateLimiter(max_per_sec=RATE_LIMIT)


def _check_size(text: str) -> None:
    if len(text) > MAX_CHARS:
        raise HTTPException(status_code=413, detail=f"Text exceeds {MAX_CHARS} characters")


def _content_hash(text: str) -> str:
    return hashlib.sha256(text.encode()).hexdigest()[:16]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "hostname": socket.gethostname(),
    }


@app.post("/render")
async def render(
    body: RenderRequest,
    _: str = Depends(_verify),
):
    _render_limiter.check()
    _check_size(body.text)
    runs = parse_text(body.text, shorthand=body.shorthand)
    logger.debug("render: %d chars -> %d runs", len(body.text), len(runs))

    result: dict = {"hash": _content_hash(body.text)}
    if body.format == "runs":
        result["runs"] = [run.to_dict() for run in merge_runs(runs)]
    else:
        result["lines"] = [[run.to_dict() for run in line] for line in split_lines(runs)]
    result["ts"] = _now()
    return result


@app.post("/render/html")
async def render_html(
    body: HtmlRequest,
    _: str = Depends(_verify),
):
    _render_limiter.check()
    _check_size(body.text)
    runs = merge_runs(parse_text(body.text, shorthand=body.shorthand))
    return {
        "hash": _content_hash(body.text),
        "html": runs_to_html(runs, wrap=True),
        "ts": _now(),
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=HOST, port=PORT)
