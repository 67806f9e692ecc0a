"""Browser launch helpers."""

from .launch import (
    browser_session,
    build_context_options,
    build_launch_options,
    get_headless,
    launch_browser,
    shutdown,
)

__all__ = [
    "browser_session",
    "build_context_options",
    "build_launch_options",
    "get_headless",
    "launch_browser",
    "shutdown",
]
