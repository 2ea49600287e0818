"""
Device Extension Registry — integration-specific device page capabilities.

A lookup table keyed by integration domain. Every provider exposes the
same two calls, so the device page asks the registry instead of probing
which integrations a device belongs to.
"""

import logging
from typing import Dict, List, Optional

from badge_kernel.models.device import DeviceAction, DeviceAlert, DeviceInfo
from badge_kernel.models.state import HassContext

logger = logging.getLogger(__name__)

HA_URL_PREFIX = "homeassistant://"


class DeviceExtension:
    """Base provider: contributes nothing."""

    domain: str = ""

    def get_actions(self, device: DeviceInfo, hass: HassContext) -> List[DeviceAction]:
        return []

    def get_alerts(self, device: DeviceInfo, hass: HassContext) -> List[DeviceAlert]:
        return []


class MQTTExtension(DeviceExtension):
    domain = "mqtt"

    def get_actions(self, device, hass):
        return [
            DeviceAction(label="MQTT info", integration=self.domain, action="mqtt_info"),
        ]


class ZHAExtension(DeviceExtension):
    domain = "zha"

    def get_actions(self, device, hass):
        return [
            DeviceAction(label="Reconfigure", integration=self.domain, action="zha_reconfigure"),
            DeviceAction(label="Manage Zigbee device", integration=self.domain, action="zha_manage_clusters"),
        ]


class ZwaveJSExtension(DeviceExtension):
    domain = "zwave_js"

    def get_actions(self, device, hass):
        return [
            DeviceAction(label="Re-interview", integration=self.domain, action="zwave_js_reinterview"),
            DeviceAction(label="Rebuild routes", integration=self.domain, action="zwave_js_rebuild_routes"),
        ]

    def get_alerts(self, device, hass):
        for entity_id in device.entities:
            if not entity_id.endswith("_node_status"):
                continue
            state_obj = hass.get(entity_id)
            if state_obj is not None and state_obj.state == "dead":
                return [DeviceAlert(
                    level="warning",
                    text="This device is dead and not responding.",
                    integration=self.domain,
                )]
        return []


class MatterExtension(DeviceExtension):
    domain = "matter"

    def get_actions(self, device, hass):
        return [
            DeviceAction(label="Ping device", integration=self.domain, action="matter_ping"),
            DeviceAction(label="Interview device", integration=self.domain, action="matter_interview"),
        ]


class DeviceExtensionRegistry:
    """Maps integration domains to their device page providers."""

    def __init__(self, register_defaults: bool = True):
        self._extensions: Dict[str, DeviceExtension] = {}
        if register_defaults:
            for extension in (MQTTExtension(), ZHAExtension(), ZwaveJSExtension(), MatterExtension()):
                self.register(extension)

    @property
    def domains(self) -> List[str]:
        return list(self._extensions)

    def register(self, extension: DeviceExtension) -> None:
        self._extensions[extension.domain] = extension

    def unregister(self, domain: str) -> None:
        self._extensions.pop(domain, None)

    def get(self, domain: str) -> Optional[DeviceExtension]:
        return self._extensions.get(domain)

    def _providers(self, device: DeviceInfo) -> List[DeviceExtension]:
        return [self._extensions[d] for d in device.integrations if d in self._extensions]

    def get_device_actions(self, device: DeviceInfo, hass: HassContext) -> List[DeviceAction]:
        """Configuration URL action first, then each integration's in device order."""
        actions = []
        url = device.configuration_url
        if url:
            internal = url.startswith(HA_URL_PREFIX)
            actions.append(DeviceAction(
                label="Visit",
                href=url.replace(HA_URL_PREFIX, "/", 1) if internal else url,
                target=None if internal else "_blank",
                icon="mdi:cog",
            ))
        for provider in self._providers(device):
            actions.extend(provider.get_actions(device, hass))
        logger.debug("Device %s: %d actions", device.id, len(actions))
        return actions

    def get_device_alerts(self, device: DeviceInfo, hass: HassContext) -> List[DeviceAlert]:
        alerts = []
        for provider in self._providers(device):
            alerts.extend(provider.get_alerts(device, hass))
        return alerts
