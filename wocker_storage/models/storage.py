"""Storage entity: persisted fields plus derived container/volume/image names."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from wocker_storage.core.errors import ValidationError


class StorageType(str, Enum):
    """Supported backing service engines."""
    MINIO = "minio"
    REDIS = "redis"


# (repository, version) used when a storage has no image override
DEFAULT_IMAGES: Dict[StorageType, Tuple[str, str]] = {
    StorageType.MINIO: ("minio/minio", "latest"),
    StorageType.REDIS: ("redis", "latest"),
}

_HOST = r"[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?)*(?::[0-9]+)?"
_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_REPOSITORY = rf"(?:{_HOST}/)?{_COMPONENT}(?:/{_COMPONENT})*"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"sha256:[a-f0-9]{64}"

IMAGE_REFERENCE_RE = re.compile(
    rf"(?P<repository>{_REPOSITORY})(?::(?P<tag>{_TAG})|@(?P<digest>{_DIGEST}))?", re.ASCII
)
IMAGE_NAME_RE = re.compile(_REPOSITORY, re.ASCII)
IMAGE_VERSION_RE = re.compile(rf"(?:{_TAG}|{_DIGEST})", re.ASCII)
STORAGE_NAME_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_.-]*", re.ASCII)
VOLUME_NAME_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_.-]+", re.ASCII)


def parse_storage_type(value: Any) -> StorageType:
    """Coerce a raw value ('minio', StorageType.MINIO) into a StorageType."""
    try:
        return StorageType(value)
    except ValueError:
        valid = ", ".join(t.value for t in StorageType)
        raise ValidationError(f"Unknown storage type '{value}' (expected one of: {valid})")


def validate_storage_name(name: str) -> str:
    """Return name unchanged if it can be used in container and volume names."""
    if not name:
        raise ValidationError("Storage name is required")
    if not STORAGE_NAME_RE.fullmatch(name):
        raise ValidationError(
            f"Invalid storage name '{name}': use letters, digits, '.', '_' or '-', "
            "starting with a letter or digit"
        )
    return name


def default_volume_name(storage_type: StorageType, name: str) -> str:
    return f"wocker-storage-{storage_type.value}-{name}"


def format_image_tag(repository: str, version: str) -> str:
    """Join repository and version, using '@' for digest versions."""
    if version.startswith("sha256:"):
        return f"{repository}@{version}"
    return f"{repository}:{version}"


@dataclass
class Storage:
    """One configured backing service.

    Optional fields hold explicit overrides only; ``None`` means "use the
    type default", which is resolved on every read and never stored.
    """
    name: str
    type: StorageType
    username: Optional[str] = None
    password: Optional[str] = None
    image_name: Optional[str] = None
    image_version: Optional[str] = None
    volume: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValidationError("Storage name is required")
        self.type = parse_storage_type(self.type)

    @property
    def container_name(self) -> str:
        return f"{self.type.value}-{self.name}.ws"

    @property
    def default_volume(self) -> str:
        return default_volume_name(self.type, self.name)

    @property
    def volume_name(self) -> str:
        return self.volume or self.default_volume

    @property
    def has_custom_volume(self) -> bool:
        """True when the volume differs from the derived default."""
        return self.volume_name != self.default_volume

    @property
    def effective_image_name(self) -> str:
        return self.image_name or DEFAULT_IMAGES[self.type][0]

    @property
    def effective_image_version(self) -> str:
        return self.image_version or DEFAULT_IMAGES[self.type][1]

    @property
    def image_tag(self) -> str:
        return format_image_tag(self.effective_image_name, self.effective_image_version)

    def set_image(self, image: str) -> None:
        """Replace the whole image reference, e.g. 'quay.io/minio/minio:RELEASE'.

        Raises:
            ValidationError: If image is not a valid image reference
        """
        match = IMAGE_REFERENCE_RE.fullmatch(image or "")
        if not match:
            raise ValidationError(f"Invalid image reference: '{image}'")

        self.image_name = match.group("repository")
        self.image_version = match.group("digest") or match.group("tag") or "latest"

    def set_image_name(self, image_name: str) -> None:
        """Replace the repository, keeping the current effective version."""
        if not IMAGE_NAME_RE.fullmatch(image_name or ""):
            raise ValidationError(f"Invalid image name: '{image_name}'")

        self.image_version = self.effective_image_version
        self.image_name = image_name

    def set_image_version(self, image_version: str) -> None:
        """Replace the version, keeping the current effective repository."""
        if not IMAGE_VERSION_RE.fullmatch(image_version or ""):
            raise ValidationError(f"Invalid image version: '{image_version}'")

        self.image_name = self.effective_image_name
        self.image_version = image_version

    def set_volume(self, volume: str) -> None:
        if not VOLUME_NAME_RE.fullmatch(volume or ""):
            raise ValidationError(f"Invalid volume name: '{volume}'")
        self.volume = volume

    def to_object(self) -> Dict[str, Any]:
        """Serialize persisted fields only, in document key style."""
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "username": self.username,
            "password": self.password,
            "imageName": self.image_name,
            "imageVersion": self.image_version,
            "volume": self.volume,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_object(cls, data: Dict[str, Any]) -> "Storage":
        return cls(
            name=data["name"],
            type=data["type"],
            username=data.get("username"),
            password=data.get("password"),
            image_name=data.get("imageName"),
            image_version=data.get("imageVersion"),
            volume=data.get("volume"),
        )
