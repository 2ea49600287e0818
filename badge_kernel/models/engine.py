"""Engine configuration."""

from pydantic import BaseModel


class EngineConfig(BaseModel):
    """Configuration for an entity-filter badge instance."""

    # Reference equality as the change signal. Requires copy-on-write
    # StateObjects from the host; set False to fall back to structural
    # comparison at O(attributes) cost per watched entity.
    identity_checks: bool = True
    gap: str = "8px"
    preview: bool = False
