"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo

from colibri.application.live_view import LiveViewController
from colibri.infrastructure.config import Settings
from colibri.infrastructure.persistence.import_digest_file import ImportDigestFile
from colibri.infrastructure.persistence.json_order_gateway import JsonOrderGateway
from colibri.infrastructure.realtime.local_change_feed import LocalChangeFeed

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)


@dataclass
class Container:
    settings: Settings
    tz: tzinfo
    change_feed: LocalChangeFeed
    gateway: JsonOrderGateway
    live_view: LiveViewController
    import_digest: ImportDigestFile


def build(settings: Settings | None = None) -> Container:
    settings = settings or Settings.from_env()
    tz = ZoneInfo(settings.timezone)
    change_feed = LocalChangeFeed()
    gateway = JsonOrderGateway(settings.store_path, change_feed=change_feed)
    live_view = LiveViewController(gateway, change_feed, tz=tz)
    return Container(
        settings=settings,
        tz=tz,
        change_feed=change_feed,
        gateway=gateway,
        live_view=live_view,
        import_digest=ImportDigestFile(settings.import_digest_path),
    )
