"""Lazy service exports so importing one service does not pull in every dependency."""

__all__ = [
    "auth_service",
    "cache_service",
    "content_store",
    "media_service",
    "realtime_service",
]


def __getattr__(name: str):
    if name == "auth_service":
        from yda_portal.services.auth_service import auth_service

        return auth_service
    if name == "cache_service":
        from yda_portal.services.cache_service import cache_service

        return cache_service
    if name == "content_store":
        from yda_portal.services.content_store import content_store

        return content_store
    if name == "media_service":
        from yda_portal.services.media_service import media_service

        return media_service
    if name == "realtime_service":
        from yda_portal.services.realtime_service import realtime_service

        return realtime_service
    raise AttributeError(name)
