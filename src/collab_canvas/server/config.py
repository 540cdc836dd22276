from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime config (server).

    - Loaded from environment variables
    - Also reads `.env` if present (via pydantic-settings + python-dotenv)
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="COLLAB_CANVAS_", extra="ignore")

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    # Debugging
    debug_log_msgs: bool = False

    # Abandoned strokes are kept until their connection closes unless this is set.
    stroke_idle_timeout_s: float | None = None

    # Cursor colours handed out to connections round-robin
    cursor_palette: Annotated[list[str], Field(min_length=1)] = [
        "#e6194b",
        "#3cb44b",
        "#4363d8",
        "#f58231",
        "#911eb4",
        "#42d4f4",
        "#f032e6",
        "#9a6324",
    ]

    # render.png: longest edge in px
    render_size_px: int = 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
