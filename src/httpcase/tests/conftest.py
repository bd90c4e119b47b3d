from __future__ import annotations

import pytest

from httpcase.foundation.config import clear_settings_cache
from httpcase.runtime.observability import BoundLogger, CaptureRenderer


@pytest.fixture(autouse=True)
def _fresh_settings() -> None:
    clear_settings_cache()


@pytest.fixture
def capture() -> CaptureRenderer:
    return CaptureRenderer()


@pytest.fixture
def log(capture: CaptureRenderer) -> BoundLogger:
    """Logger writing into the ``capture`` renderer."""
    return BoundLogger(_renderer=capture)
