"""Bubble map screenshot capture with retries and fallback."""

from .browser import Browser, BrowserSession, LaunchOptions, PlaywrightBrowser, Viewport
from .fallback import render_fallback_html, render_placeholder_png
from .orchestrator import CaptureConfig, CaptureOrchestrator
from .overlays import (
    CleanupBackdrops,
    OverlayDismissalStrategy,
    PressEscape,
    RemoveDialogElements,
    default_strategies,
    dismiss_overlays,
)

__all__ = [
    "Browser",
    "BrowserSession",
    "CaptureConfig",
    "CaptureOrchestrator",
    "CleanupBackdrops",
    "LaunchOptions",
    "OverlayDismissalStrategy",
    "PlaywrightBrowser",
    "PressEscape",
    "RemoveDialogElements",
    "Viewport",
    "default_strategies",
    "dismiss_overlays",
    "render_fallback_html",
    "render_placeholder_png",
]
