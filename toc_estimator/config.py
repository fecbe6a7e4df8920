"""Runtime configuration read from the environment."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_PAGES = 10
DEFAULT_SOFFICE_BIN = "soffice"
DEFAULT_RENDER_TIMEOUT = 120


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %d", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class EstimatorConfig:
    """Settings for page counting and estimation.

    Environment variables are the configuration surface; the CLI loads a
    local ``.env`` file into the environment before calling :meth:`load`.
    """

    fallback_pages: int = DEFAULT_FALLBACK_PAGES
    soffice_bin: str = DEFAULT_SOFFICE_BIN
    render_timeout: int = DEFAULT_RENDER_TIMEOUT

    @classmethod
    def load(cls) -> "EstimatorConfig":
        return cls(
            fallback_pages=_positive_int("TOC_FALLBACK_PAGES", DEFAULT_FALLBACK_PAGES),
            soffice_bin=os.getenv("TOC_SOFFICE_BIN") or DEFAULT_SOFFICE_BIN,
            render_timeout=_positive_int("TOC_RENDER_TIMEOUT", DEFAULT_RENDER_TIMEOUT),
        )
