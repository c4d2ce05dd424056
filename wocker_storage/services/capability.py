"""Capability detection for named volume support in the container engine.

Returns graceful fallbacks when the engine cannot be queried (daemon down,
remote host unreachable) so callers can report a useful hint.
"""
from dataclasses import dataclass
from typing import Optional

MIN_VOLUME_API_VERSION = "1.25"


@dataclass
class VolumeCapability:
    supported: bool
    reason: str
    api_version: Optional[str] = None
    hint: Optional[str] = None


def _version_tuple(version: str):
    parts = []
    for part in version.split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def version_gte(version: str, minimum: str) -> bool:
    """Compare dotted versions numerically ('1.43' >= '1.25')."""
    return _version_tuple(version) >= _version_tuple(minimum)


def detect_volume_support(driver) -> VolumeCapability:
    """Check whether driver's engine can manage named volumes."""
    if driver.mock:
        return VolumeCapability(True, "mock mode", api_version="mock")

    api_version = driver.api_version()
    hint = f"Please update Docker to API version {MIN_VOLUME_API_VERSION} or newer."

    if not api_version:
        return VolumeCapability(False, "docker server version unavailable", hint=hint)

    if version_gte(api_version, MIN_VOLUME_API_VERSION):
        return VolumeCapability(True, f"docker API {api_version}", api_version=api_version)

    return VolumeCapability(
        False,
        f"docker API {api_version} is older than {MIN_VOLUME_API_VERSION}",
        api_version=api_version,
        hint=hint,
    )
