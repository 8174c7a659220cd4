from __future__ import annotations

import pytest

from xvals import reset_default_context


@pytest.fixture(autouse=True)
def _fresh_default_context():
    """Every test starts and ends without a process-wide context."""

    reset_default_context()
    yield
    reset_default_context()
