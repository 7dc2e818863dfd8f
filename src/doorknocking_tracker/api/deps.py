from __future__ import annotations

import threading

from fastapi import Request

from ..services import TrackerServices, build_services

_BUILD_LOCK = threading.Lock()


def ensure_services(app) -> TrackerServices:
    services = getattr(app.state, "services", None)
    if services is not None:
        return services
    with _BUILD_LOCK:
        services = getattr(app.state, "services", None)
        if services is None:
            services = build_services()
            app.state.services = services
    return services


def get_services(request: Request) -> TrackerServices:
    return ensure_services(request.app)
