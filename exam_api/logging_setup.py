from __future__ import annotations
import logging


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    raw = level.strip()
    if raw.isdigit():
        return int(raw)
    resolved = logging.getLevelName(raw.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_console_logging(level: int | str = logging.INFO) -> None:
    """
    Call once at app start. Prints logs to console.
    `level` may be a logging constant or a name such as "DEBUG".
    """
    resolved = _resolve_level(level)
    root = logging.getLogger()
    if root.handlers:
        # already configured (avoid duplicates)
        root.setLevel(resolved)
        return

    root.setLevel(resolved)
    h = logging.StreamHandler()
    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    h.setFormatter(fmt)
    root.addHandler(h)
    # urllib3 logs every request at DEBUG
    logging.getLogger("urllib3").setLevel(max(resolved, logging.INFO))
