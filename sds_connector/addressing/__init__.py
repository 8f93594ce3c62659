"""Addressing conventions for SDS request paths."""

from __future__ import annotations

from .base import BaseAddressing
from .account import AccountAddressing
from .tenant import CommunityAddressing, NamespaceAddressing

_ADDRESSING: dict[str, type[BaseAddressing]] = {
    "account": AccountAddressing,
    "namespace": NamespaceAddressing,
    "community": CommunityAddressing,
}


def get_addressing(mode: str) -> BaseAddressing:
    """
    Get the addressing convention for a mode name.

    Raises:
        ValueError: Unknown mode
    """
    try:
        return _ADDRESSING[mode.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown addressing mode {mode!r}, expected one of: {', '.join(_ADDRESSING)}"
        ) from None


__all__ = [
    "BaseAddressing",
    "AccountAddressing",
    "NamespaceAddressing",
    "CommunityAddressing",
    "get_addressing",
]
