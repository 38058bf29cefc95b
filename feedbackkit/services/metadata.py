"""Metadata collectors: snapshot app and host context for a submission."""

from __future__ import annotations

import locale
import logging
import os
import platform
from importlib import metadata as importlib_metadata
from typing import Callable, Mapping, Protocol, runtime_checkable

from feedbackkit.schemas.feedback import UNKNOWN, FeedbackMetadata

logger = logging.getLogger(__name__)


@runtime_checkable
class MetadataCollector(Protocol):
    async def collect(self) -> FeedbackMetadata: ...


def _probe(name: str, reader: Callable[[], str | None]) -> str:
    """Run one read, degrading to the sentinel instead of failing."""
    try:
        value = reader()
    except Exception as exc:
        logger.debug("Metadata probe %s failed: %s", name, exc)
        return UNKNOWN
    if value is None:
        return UNKNOWN
    value = str(value).strip()
    return value or UNKNOWN


def _distribution_version(distribution: str | None) -> str | None:
    if not distribution:
        return None
    return importlib_metadata.version(distribution)


def _device_model() -> str:
    uname = platform.uname()
    return " ".join(part for part in (uname.system, uname.machine) if part)


def _os_version() -> str:
    return platform.platform(terse=True)


def _locale() -> str | None:
    current = locale.getlocale()[0]
    if current:
        return current
    for variable in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(variable)
        if value and value not in {"C", "POSIX"}:
            return value.split(".", 1)[0]
    return None


class DefaultMetadataCollector:
    """Reads app version from installed package metadata and host details
    from :mod:`platform` and :mod:`locale`.

    Explicit ``app_version``/``app_build`` win over anything discovered.
    """

    def __init__(
        self,
        *,
        distribution: str | None = None,
        app_version: str | None = None,
        app_build: str | None = None,
        custom_fields: Mapping[str, str] | None = None,
    ):
        self.distribution = distribution
        self.app_version = app_version
        self.app_build = app_build
        self.custom_fields = dict(custom_fields or {})

    async def collect(self) -> FeedbackMetadata:
        version = self.app_version or _probe("app_version", lambda: _distribution_version(self.distribution))
        return FeedbackMetadata(
            app_version=version,
            app_build=_probe("app_build", lambda: self.app_build),
            device_model=_probe("device_model", _device_model),
            os_version=_probe("os_version", _os_version),
            locale=_probe("locale", _locale),
            custom_fields=dict(self.custom_fields),
        )


class StaticMetadataCollector:
    """Always returns the same metadata; handy for previews and tests."""

    def __init__(self, metadata: FeedbackMetadata):
        self.metadata = metadata

    async def collect(self) -> FeedbackMetadata:
        return self.metadata
