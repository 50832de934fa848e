"""Command result helpers.

Every command produces ``{"success": True, ...payload}`` or
``{"success": False, "error": message}``.
"""

from __future__ import annotations

from typing import Any

CommandResult = dict[str, Any]


def ok(**payload: Any) -> CommandResult:
    return {"success": True, **payload}


def failure(error: str) -> CommandResult:
    return {"success": False, "error": error}


def is_success(result: Any) -> bool:
    return isinstance(result, dict) and result.get("success") is True


def error_message(exc: BaseException) -> str:
    """The text a failed result carries for ``exc``."""
    return str(exc) or type(exc).__name__
