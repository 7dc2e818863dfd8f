from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import Settings, get_settings
from .directory import PropertyDirectory
from .ledger import ActivityLedger
from .location import Geocoder, LocationProbe
from .providers import get_geocoder, get_identity_provider
from .session import IdentityProvider, SessionStore
from .storage import KeyValueStore, SQLiteKeyValueStore

logger = logging.getLogger("dkt.services")


@dataclass
class TrackerServices:
    """The four managers, constructed once and handed to the outer surfaces."""

    settings: Settings
    store: KeyValueStore
    session: SessionStore
    location: LocationProbe
    directory: PropertyDirectory
    ledger: ActivityLedger
    started: bool = field(default=False)

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()


def build_services(
    settings: Optional[Settings] = None,
    *,
    store: Optional[KeyValueStore] = None,
    identity: Optional[IdentityProvider] = None,
    geocoder: Optional[Geocoder] = None,
    directory: Optional[PropertyDirectory] = None,
) -> TrackerServices:
    settings = settings or get_settings()
    store = store if store is not None else SQLiteKeyValueStore(settings.state_db)
    if directory is None:
        directory = PropertyDirectory.load(
            settings.properties_csv,
            strict=settings.strict_csv,
            numeric_default=settings.numeric_default,
        )
    services = TrackerServices(
        settings=settings,
        store=store,
        session=SessionStore(identity or get_identity_provider(settings=settings), store),
        location=LocationProbe(geocoder or get_geocoder(settings=settings)),
        directory=directory,
        ledger=ActivityLedger(store),
    )
    logger.debug("services built (source=%s)", directory.source)
    return services
