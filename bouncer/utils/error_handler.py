"""
Bouncer - Error Handler
=======================

Detailed error context, categorisation and process-wide fatal handling.

Features:
- Error categorization (discord, network, database, config, general)
- Severity levels; CRITICAL requests process termination
- Recovery suggestions in every log line
- Critical error context saved as JSON under logs/errors/
- asyncio loop handler (logs at HIGH) and sys.excepthook (CRITICAL)
"""

import json
import sqlite3
import sys
import traceback
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

import discord

from bouncer.core.config import ConfigValidationError
from bouncer.core.logger import LOGS_DIR, logger


ERRORS_DIR = LOGS_DIR / "errors"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorContext:
    """Captures and formats detailed error context"""

    @staticmethod
    def get_full_context(e: BaseException, location: str, **kwargs) -> Dict[str, Any]:
        """
        Get comprehensive error context.

        Args:
            e: The exception
            location: Where the error occurred
            **kwargs: Additional context (member, etc.)
        """
        context = {
            'timestamp': datetime.now().isoformat(),
            'location': location,
            'error_type': type(e).__name__,
            'error_message': str(e),
            'traceback': ''.join(traceback.format_exception(type(e), e, e.__traceback__)),
            'python_version': sys.version,
            'additional_context': {k: str(v) for k, v in kwargs.items()},
        }

        member = kwargs.get('member')
        if isinstance(member, discord.Member):
            context['member_context'] = {
                'name': str(member),
                'id': member.id,
                'roles': [role.name for role in member.roles],
                'joined_at': member.joined_at.isoformat() if member.joined_at else None,
            }

        return context


class ErrorHandler:
    """Error handling with context, severity and recovery hints"""

    ERROR_CATEGORIES = {
        'discord': (discord.DiscordException,),
        'network': (ConnectionError, TimeoutError, OSError),
        'database': (sqlite3.Error,),
        'config': (ConfigValidationError,),
    }

    RECOVERY_SUGGESTIONS = {
        discord.Forbidden: "Check bot permissions and role hierarchy in server settings",
        discord.NotFound: "Resource not found - check IDs and channels",
        discord.HTTPException: "Discord API issue - retry later",
        ConnectionError: "Network connection issue - check internet connection",
        TimeoutError: "Request timed out - retry later",
        sqlite3.OperationalError: "Database locked or unreadable - check the data directory",
        sqlite3.Error: "General database error - check database file",
        ConfigValidationError: "Fix the .env or permissions file and restart",
    }

    _fatal_callback: Optional[Callable[[], None]] = None
    exit_requested: bool = False

    @classmethod
    def categorize_error(cls, e: BaseException) -> str:
        for category, error_types in cls.ERROR_CATEGORIES.items():
            if isinstance(e, error_types):
                return category
        return 'general'

    @classmethod
    def get_recovery_suggestion(cls, e: BaseException) -> str:
        for error_type, suggestion in cls.RECOVERY_SUGGESTIONS.items():
            if isinstance(e, error_type):
                return suggestion
        return "Unexpected error - check logs for details"

    @classmethod
    def set_fatal_callback(cls, callback: Optional[Callable[[], None]]) -> None:
        """Register what to run when a CRITICAL error requests termination."""
        cls._fatal_callback = callback

    @classmethod
    def handle(
        cls,
        e: BaseException,
        location: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        **context,
    ) -> None:
        """
        Handle an error with full context.

        Args:
            e: The exception
            location: Where the error occurred
            severity: CRITICAL logs the traceback, saves context and
                requests process termination
            **context: Additional context
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(e)
        full_context = ErrorContext.get_full_context(e, location, **context)

        details = [
            ("Location", location),
            ("Category", category.upper()),
            ("Severity", severity.value.upper()),
            ("Error", f"{full_context['error_type']}: {str(e)[:200]}"),
            ("Recovery", suggestion),
        ]
        details.extend((k, str(v)[:100]) for k, v in context.items())

        if severity == ErrorSeverity.CRITICAL:
            logger.critical("Critical Error", details)
            logger.critical(f"Traceback:\n{full_context['traceback']}")
            cls._store_critical_error(full_context)
            cls._request_exit()
        elif severity == ErrorSeverity.HIGH:
            logger.error("Error", details)
        else:
            logger.warning("Error", details)

    @classmethod
    def _request_exit(cls) -> None:
        cls.exit_requested = True
        if cls._fatal_callback:
            cls._fatal_callback()

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        try:
            ERRORS_DIR.mkdir(exist_ok=True, parents=True)
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            error_file = ERRORS_DIR / f"error_{timestamp}.json"
            with open(error_file, 'w', encoding='utf-8') as f:
                json.dump(context, f, indent=2, default=str)
            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.warning(f"Failed to save error details: {save_error}")


# =============================================================================
# Process-wide Handlers
# =============================================================================

def _loop_exception_handler(loop, context: Dict[str, Any]) -> None:
    # A failed background task is logged; only sys.excepthook terminates
    exc = context.get("exception")
    if exc is None:
        logger.error("Event Loop Error", [("Message", str(context.get("message")))])
        return
    ErrorHandler.handle(exc, location="event_loop", severity=ErrorSeverity.HIGH)


def _excepthook(exc_type, exc, tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    ErrorHandler.handle(exc, location="sys.excepthook", severity=ErrorSeverity.CRITICAL)


def install_exception_handlers(loop=None) -> None:
    """Route uncaught exceptions (sync and asyncio) through ErrorHandler."""
    sys.excepthook = _excepthook
    if loop is not None:
        loop.set_exception_handler(_loop_exception_handler)


__all__ = [
    "ErrorContext",
    "ErrorHandler",
    "ErrorSeverity",
    "install_exception_handlers",
]
