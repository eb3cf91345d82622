"""Explicit outcomes for reads that may fail while disconnected.

Data-access calls never fabricate data. They return :class:`Online` with
what the server said, :class:`Offline` when the server could not be reached,
or :class:`LocalOnly` when the target only exists on this device. The
presentation layer decides whether to show cached or placeholder data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Online(Generic[T]):
    data: T


@dataclass(frozen=True)
class Offline:
    reason: str


@dataclass(frozen=True)
class LocalOnly(Generic[T]):
    """The operation was applied to a local placeholder; no network call was made."""

    data: T


FetchResult = Union[Online[T], Offline, LocalOnly[T]]
