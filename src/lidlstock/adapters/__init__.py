from lidlstock.adapters.base import PageStateRenderer, RenderError
from lidlstock.adapters.playwright_base import PlaywrightPageRenderer

__all__ = [
    "PageStateRenderer",
    "PlaywrightPageRenderer",
    "RenderError",
]
