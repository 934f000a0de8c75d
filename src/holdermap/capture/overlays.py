"""Overlay dismissal strategies run before every screenshot."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

from holdermap.capture.browser import BrowserSession

logger = logging.getLogger(__name__)

REMOVE_DIALOGS_JS = """
() => {
  let removed = false;
  const popup = document.querySelector('.mdc-dialog__surface[role="alertdialog"]');
  const backdrop = document.querySelector('.mdc-dialog__scrim');
  if (popup) { popup.remove(); removed = true; }
  if (backdrop) { backdrop.remove(); removed = true; }
  document.querySelectorAll('.mdc-dialog').forEach(el => { el.remove(); removed = true; });
  document.querySelectorAll('[role="dialog"], [role="alertdialog"]')
    .forEach(el => { el.remove(); removed = true; });
  document.body.style.overflow = '';
  document.body.style.position = '';
  document.body.style.width = '';
  document.body.style.height = '';
  return removed;
}
"""

OVERLAY_PRESENT_JS = """
() => !!(
  document.querySelector('.mdc-dialog__surface') ||
  document.querySelector('.mdc-dialog') ||
  document.querySelector('[role="dialog"]') ||
  document.querySelector('[role="alertdialog"]')
)
"""

CLEANUP_BACKDROPS_JS = """
() => {
  document.body.style.overflow = '';
  document.body.style.position = '';
  const backdrops = document.querySelectorAll(
    '.mdc-dialog__scrim, .modal-backdrop, .dialog-backdrop'
  );
  backdrops.forEach(el => el.remove());
  return backdrops.length > 0;
}
"""


class OverlayDismissalStrategy(ABC):
    """One way of getting dialogs out of the way of the bubble map."""

    name: ClassVar[str]

    def __init__(self, settle_delay: float = 0.5) -> None:
        self.settle_delay = settle_delay

    @abstractmethod
    async def dismiss(self, session: BrowserSession) -> bool:
        """Try to dismiss overlays; return whether anything was acted on."""
        ...


class RemoveDialogElements(OverlayDismissalStrategy):
    """Delete dialog, alertdialog and Material dialog nodes from the DOM."""

    name: ClassVar[str] = "remove_dialogs"

    async def dismiss(self, session: BrowserSession) -> bool:
        removed = bool(await session.evaluate(REMOVE_DIALOGS_JS))
        if removed:
            await session.wait(self.settle_delay)
        return removed


class PressEscape(OverlayDismissalStrategy):
    """Press Escape if a dialog is still on screen."""

    name: ClassVar[str] = "press_escape"

    async def dismiss(self, session: BrowserSession) -> bool:
        if not await session.evaluate(OVERLAY_PRESENT_JS):
            return False
        logger.warning("Modal still detected, trying keyboard escape")
        await session.press("Escape")
        await session.wait(self.settle_delay)
        return True


class CleanupBackdrops(OverlayDismissalStrategy):
    """Strip leftover backdrops and scroll locks."""

    name: ClassVar[str] = "cleanup_backdrops"

    async def dismiss(self, session: BrowserSession) -> bool:
        return bool(await session.evaluate(CLEANUP_BACKDROPS_JS))


def default_strategies(settle_delay: float = 0.5) -> list[OverlayDismissalStrategy]:
    return [
        RemoveDialogElements(settle_delay),
        PressEscape(settle_delay),
        CleanupBackdrops(settle_delay),
    ]


async def dismiss_overlays(
    session: BrowserSession,
    strategies: Sequence[OverlayDismissalStrategy],
) -> dict[str, bool]:
    """Run every strategy in order, whatever the earlier ones reported.

    Overlays can reappear, so a strategy that acted does not stop the next
    one. A strategy that raises is logged and counted as not having acted.
    """
    outcomes: dict[str, bool] = {}
    for strategy in strategies:
        try:
            outcomes[strategy.name] = await strategy.dismiss(session)
        except Exception as e:
            logger.warning(f"Overlay strategy {strategy.name} failed: {e}")
            outcomes[strategy.name] = False
    logger.debug(f"Overlay dismissal outcomes: {outcomes}")
    return outcomes
