"""Device page models used by the integration capability table."""

from typing import List, Optional

from pydantic import BaseModel


class DeviceInfo(BaseModel):
    id: str
    name: str
    integrations: List[str] = []            # Integration domains, e.g. ["zha"]
    configuration_url: Optional[str] = None
    entities: List[str] = []                # Entity ids belonging to the device


class DeviceAction(BaseModel):
    """An entry in the device page's action list."""

    label: str
    integration: Optional[str] = None
    action: Optional[str] = None            # Host-side command identifier
    href: Optional[str] = None
    target: Optional[str] = None
    icon: Optional[str] = None


class DeviceAlert(BaseModel):
    level: str = "warning"                  # "info" | "warning" | "error"
    text: str
    integration: Optional[str] = None
