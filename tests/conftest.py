import pytest


@pytest.fixture(autouse=True)
def _no_gap_override(monkeypatch):
    monkeypatch.delenv("GRIDTERM_REDRAW_GAP", raising=False)
