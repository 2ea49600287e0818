"""
Badge Kernel API — FastAPI endpoints.

Hosts badge instances over a shared State Store for:
- Badge configuration and render output
- State publication (single and batched)
- Global context (locale, user, screen)
- Device page capabilities
"""

import logging
from typing import Dict, List, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from badge_kernel.engine.badge import EntityFilterBadge
from badge_kernel.errors import ConfigurationError
from badge_kernel.extensions.registry import DeviceExtensionRegistry
from badge_kernel.models.device import DeviceInfo
from badge_kernel.models.engine import EngineConfig
from badge_kernel.models.state import LocaleContext, UserInfo
from badge_kernel.state.store import StateStore

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class BadgeCreateRequest(BaseModel):
    config: dict
    id: Optional[str] = None


class StateUpdateRequest(BaseModel):
    state: str
    attributes: dict = {}


class BatchStateUpdate(BaseModel):
    entity_id: str
    state: Optional[str] = None             # None removes the entity
    attributes: dict = {}


class BatchStateRequest(BaseModel):
    updates: List[BatchStateUpdate]


class ScreenRequest(BaseModel):
    media_queries: List[str] = []


# --- Application Factory ---

def create_app(
    state_store: Optional[StateStore] = None,
    engine_config: Optional[EngineConfig] = None,
    extension_registry: Optional[DeviceExtensionRegistry] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Badge Kernel API",
        description="Entity filter badge engine",
        version="0.1.0-alpha",
    )

    store = state_store or StateStore()
    config = engine_config or EngineConfig()
    registry = extension_registry or DeviceExtensionRegistry()
    badges: Dict[str, EntityFilterBadge] = {}
    devices: Dict[str, DeviceInfo] = {}

    app.state.state_store = store
    app.state.badges = badges
    app.state.devices = devices
    app.state.extension_registry = registry

    def _publish() -> None:
        """Hand the current snapshot to every badge, once."""
        hass = store.snapshot()
        for badge in badges.values():
            badge.update(hass)

    def _get_badge(badge_id: str) -> EntityFilterBadge:
        badge = badges.get(badge_id)
        if badge is None:
            raise HTTPException(404, "Badge not found")
        return badge

    def _get_device(device_id: str) -> DeviceInfo:
        device = devices.get(device_id)
        if device is None:
            raise HTTPException(404, "Device not found")
        return device

    # === BADGES ===

    @app.post("/badges")
    def create_badge(req: BadgeCreateRequest):
        """Configure a new entity filter badge."""
        badge_id = req.id or f"badge_{uuid4().hex[:12]}"
        if badge_id in badges:
            raise HTTPException(409, "Badge already exists")

        badge = EntityFilterBadge(engine_config=config)
        try:
            badge.set_config(req.config)
        except ConfigurationError as e:
            logger.warning("Rejected badge config: %s", e)
            raise HTTPException(400, str(e))

        badge.update(store.snapshot())
        badges[badge_id] = badge
        return {"id": badge_id, "render": badge.render().model_dump()}

    @app.get("/badges")
    def list_badges():
        return [
            {"id": badge_id, "visible": badge.visible, "entities": len(badge.entities)}
            for badge_id, badge in badges.items()
        ]

    @app.get("/badges/{badge_id}")
    def get_badge(badge_id: str):
        """Current render output of a badge."""
        return _get_badge(badge_id).render().model_dump()

    @app.put("/badges/{badge_id}")
    def update_badge(badge_id: str, req: BadgeCreateRequest):
        """Replace a badge's configuration."""
        badge = _get_badge(badge_id)
        try:
            badge.set_config(req.config)
        except ConfigurationError as e:
            logger.warning("Rejected badge config for %s: %s", badge_id, e)
            raise HTTPException(400, str(e))
        return {"id": badge_id, "render": badge.render().model_dump()}

    @app.delete("/badges/{badge_id}")
    def delete_badge(badge_id: str):
        _get_badge(badge_id)
        del badges[badge_id]
        return {"status": "deleted", "badge_id": badge_id}

    @app.get("/badges/{badge_id}/stats")
    def badge_stats(badge_id: str):
        badge = _get_badge(badge_id)
        return {
            **badge.stats.model_dump(),
            "watch_set": sorted(badge.watch_set),
        }

    # === STATES ===

    @app.get("/states")
    def list_states():
        return {
            entity_id: state_obj.model_dump(mode="json")
            for entity_id, state_obj in store.states.items()
        }

    @app.put("/states/{entity_id}")
    def set_state(entity_id: str, req: StateUpdateRequest):
        """Publish one entity's state."""
        try:
            state_obj = store.set_state(entity_id, req.state, req.attributes)
        except ValueError as e:
            raise HTTPException(400, str(e))
        _publish()
        return state_obj.model_dump(mode="json")

    @app.delete("/states/{entity_id}")
    def remove_state(entity_id: str):
        if not store.remove_state(entity_id):
            raise HTTPException(404, "Entity not found")
        _publish()
        return {"status": "removed", "entity_id": entity_id}

    @app.post("/states/batch")
    def set_states(req: BatchStateRequest):
        """Publish several changes as one snapshot."""
        try:
            store.apply_batch(
                (u.entity_id, u.state, u.attributes) for u in req.updates
            )
        except ValueError as e:
            raise HTTPException(400, str(e))
        _publish()
        return {"status": "applied", "count": len(req.updates)}

    # === CONTEXT ===

    @app.put("/context/locale")
    def set_locale(req: LocaleContext):
        store.set_locale(req)
        _publish()
        return req.model_dump()

    @app.put("/context/user")
    def set_user(req: UserInfo):
        store.set_user(req)
        _publish()
        return req.model_dump()

    @app.put("/context/screen")
    def set_screen(req: ScreenRequest):
        store.set_screen(req.media_queries)
        _publish()
        return {"media_queries": sorted(req.media_queries)}

    # === DEVICES ===

    @app.post("/devices")
    def register_device(req: DeviceInfo):
        devices[req.id] = req
        return req.model_dump()

    @app.get("/devices/{device_id}/actions")
    def device_actions(device_id: str):
        device = _get_device(device_id)
        actions = registry.get_device_actions(device, store.snapshot())
        return [a.model_dump(exclude_none=True) for a in actions]

    @app.get("/devices/{device_id}/alerts")
    def device_alerts(device_id: str):
        device = _get_device(device_id)
        return [a.model_dump() for a in registry.get_device_alerts(device, store.snapshot())]

    return app
