from __future__ import annotations

import logging
from pathlib import Path
import shutil

import httpx

logger = logging.getLogger(__name__)

BADGE_DIR = ".badges"
BADGE_NAMES = ("failing.svg", "passing.svg")
TIMEOUT_SECONDS = 30.0


def fetch_badges(badge_dir: Path, base_url: str, client: httpx.Client | None = None) -> list[Path]:
    """Download the passing/failing badge images into ``badge_dir``.

    A badge that cannot be downloaded is logged and skipped. Returns the
    badge files that were written.
    """
    badge_dir.mkdir(parents=True, exist_ok=True)
    base = base_url.rstrip("/")
    own_client = client is None
    http = client if client is not None else httpx.Client(timeout=TIMEOUT_SECONDS, follow_redirects=True)
    written: list[Path] = []
    try:
        for name in BADGE_NAMES:
            url = f"{base}/{name}"
            try:
                resp = http.get(url)
                resp.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning("Could not fetch badge %s: %s", url, exc)
                continue
            dest = badge_dir / name
            dest.write_bytes(resp.content)
            written.append(dest)
    finally:
        if own_client:
            http.close()
    return written


def copy_badge(badge_dir: Path, passing: bool, dest: Path) -> Path | None:
    src = badge_dir / ("passing.svg" if passing else "failing.svg")
    if not src.exists():
        logger.warning("Badge %s is missing, %s not written", src, dest)
        return None
    shutil.copyfile(src, dest)
    return dest
