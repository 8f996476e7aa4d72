"""
Request dependencies: database session, acting user and capabilities.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from roomrent.database.core import get_db
from roomrent.services.access import Actor, ActorRole, ensure_landlord
from roomrent.services.geocoding_service import GeocodingService, get_geocoding_service
from roomrent.services.notification_service import TextNotifier, get_notifier
from roomrent.services.storage_service import LocalFileStorage, get_file_storage

get_session = get_db


def get_actor(
    x_actor_role: Optional[str] = Header(None),
    x_actor_id: Optional[int] = Header(None)
) -> Actor:
    """Resolve the caller from X-Actor-Role / X-Actor-Id headers"""
    if not x_actor_role or x_actor_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing actor")
    try:
        role = ActorRole(x_actor_role.lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown actor role")
    return Actor(role=role, id=x_actor_id)


def get_landlord_id(actor: Actor = Depends(get_actor)) -> int:
    return ensure_landlord(actor)


def get_geocoder() -> GeocodingService:
    return get_geocoding_service()


def get_storage() -> LocalFileStorage:
    return get_file_storage()


def get_text_notifier() -> TextNotifier:
    return get_notifier()
