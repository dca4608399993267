from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class RenderError(RuntimeError):
    pass


class PageStateRenderer(ABC):
    """Renders a page and returns a detached copy of its injected client state."""

    def __enter__(self) -> "PageStateRenderer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    @abstractmethod
    def render_state(self, url: str, state_key: str) -> Any:
        raise NotImplementedError
