import pytest
from pydantic import ValidationError

from collab_canvas.server.config import Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.stroke_idle_timeout_s is None
    assert s.debug_log_msgs is False
    assert len(s.cursor_palette) == 8


def test_empty_cursor_palette_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, cursor_palette=[])


def test_env_override(monkeypatch):
    monkeypatch.setenv("COLLAB_CANVAS_STROKE_IDLE_TIMEOUT_S", "30")
    monkeypatch.setenv("COLLAB_CANVAS_CURSOR_PALETTE", '["#000"]')
    s = Settings(_env_file=None)
    assert s.stroke_idle_timeout_s == 30
    assert s.cursor_palette == ["#000"]
