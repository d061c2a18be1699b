"""
Bouncer Discord Bot - Logger Module
===================================

Tree-style logging with Eastern timestamps and daily log folders.

DESIGN:
    A record is a headline plus optional (key, value) branches, printed
    as one block so a single gate decision (who, which attempt, what
    happened) reads together:

        [02:30:45 PM EST] 🔒 Attempt Recorded
          ├─ User: someone (1234)
          ├─ Attempt: 2/5
          └─ State: ACTIVE

    Records go to the console and logs/YYYY-MM-DD/Bouncer-<date>.log;
    error and critical records are copied to Bouncer-Errors-<date>.log.
    Folders older than LOG_RETENTION_DAYS are removed at startup. Error
    records with details are also posted to ERROR_WEBHOOK_URL.
"""

import asyncio
import os
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import aiohttp
from zoneinfo import ZoneInfo


LOGS_DIR = Path(os.getenv("BOUNCER_LOG_DIR", "logs"))
"""Root of the dated log folders."""

LOG_RETENTION_DAYS = 7

NY_TZ = ZoneInfo("America/New_York")

Details = List[Tuple[str, str]]


def _branches(details: Iterable[Tuple[str, str]]) -> List[str]:
    details = list(details)
    return [
        f"  {'└─' if i == len(details) - 1 else '├─'} {key}: {value}"
        for i, (key, value) in enumerate(details)
    ]


class TreeLogger:
    """
    Console + daily file logger.

    Attributes:
        run_id: Short id printed in the session header and webhook footer,
            used to tell restarts apart in one day's file.
    """

    def __init__(self, root: Path = LOGS_DIR) -> None:
        self.run_id: str = uuid.uuid4().hex[:8]
        self._webhook_url: Optional[str] = None

        today = datetime.now(NY_TZ).strftime("%Y-%m-%d")
        self.log_dir = root / today
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f"Bouncer-{today}.log"
        self.error_file = self.log_dir / f"Bouncer-Errors-{today}.log"

        self._prune(root)
        self._append(self.log_file, [
            "",
            "=" * 60,
            f"NEW SESSION - RUN ID: {self.run_id}",
            datetime.now(NY_TZ).strftime("[%I:%M:%S %p %Z]"),
            "=" * 60,
        ])

    def set_webhook(self, url: Optional[str]) -> None:
        self._webhook_url = url

    # =========================================================================
    # Files
    # =========================================================================

    @staticmethod
    def _prune(root: Path) -> None:
        """Delete dated folders past retention; other entries are left alone."""
        now = datetime.now()
        removed = 0
        for folder in root.iterdir():
            if not folder.is_dir():
                continue
            try:
                age = now - datetime.strptime(folder.name, "%Y-%m-%d")
            except ValueError:
                continue
            if age.days > LOG_RETENTION_DAYS:
                shutil.rmtree(folder, ignore_errors=True)
                removed += 1
        if removed:
            print(f"[LOG CLEANUP] Removed {removed} old log directories")

    @staticmethod
    def _append(path: Path, lines: List[str]) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    def _emit(self, emoji: str, message: str, details: Optional[Details] = None, errors: bool = False) -> None:
        stamp = datetime.now(NY_TZ).strftime("[%I:%M:%S %p %Z]")
        lines = [f"{stamp} {emoji} {message}"] + _branches(details or [])

        print("\n".join(lines))
        self._append(self.log_file, lines)
        if errors:
            self._append(self.error_file, lines)

    # =========================================================================
    # Public API
    # =========================================================================

    def tree(self, title: str, items: Details, emoji: str = "📦") -> None:
        """Log a structured record."""
        self._emit(emoji, title, items)

    def debug(self, msg: str, details: Optional[Details] = None) -> None:
        # Silent unless DEBUG is set
        if os.getenv("DEBUG"):
            self._emit("🔍", msg, details)

    def info(self, msg: str) -> None:
        self._emit("ℹ️", msg)

    def success(self, msg: str) -> None:
        self._emit("✅", msg)

    def warning(self, msg: str, details: Optional[Details] = None) -> None:
        self._emit("⚠️", msg, details)

    def error(self, msg: str, details: Optional[Details] = None) -> None:
        """Log an error; with details it is also forwarded to the webhook."""
        self._emit("❌", msg, details, errors=True)
        if details and self._webhook_url:
            try:
                asyncio.get_running_loop().create_task(self._post_webhook(msg, details))
            except RuntimeError:
                # No loop yet (startup) or any more (shutdown)
                pass

    def critical(self, msg: str, details: Optional[Details] = None) -> None:
        self._emit("🚨", msg, details, errors=True)

    # =========================================================================
    # Webhook
    # =========================================================================

    async def _post_webhook(self, title: str, details: Details) -> None:
        embed = {
            "title": f"❌ {title}",
            "description": "\n".join(f"**{k}:** {v}" for k, v in details)[:4000],
            "color": 0xFF0000,
            "timestamp": datetime.now(NY_TZ).isoformat(),
            "footer": {"text": f"Run ID: {self.run_id}"},
        }
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=10)) as session:
                async with session.post(self._webhook_url, json={"embeds": [embed]}) as resp:
                    if resp.status >= 300:
                        print(f"[WEBHOOK] Error tree rejected: HTTP {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            print(f"[WEBHOOK] Failed to post error tree: {e}")


logger = TreeLogger()
"""Process-wide logger shared by every module."""


__all__ = ["logger", "TreeLogger", "NY_TZ"]
