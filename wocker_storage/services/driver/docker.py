"""Container driver backed by the docker CLI.

Supports local and remote Docker hosts through ``--host`` or ``--context``.
"""
import json
import subprocess
from typing import Dict, List, Optional, Set

from wocker_storage.core.logger import get_logger
from wocker_storage.services.capability import VolumeCapability, detect_volume_support
from wocker_storage.services.driver.base import (
    ContainerDriver,
    ContainerInfo,
    ContainerSpec,
    ContainerState,
    DockerError,
)

logger = get_logger(__name__)


class DockerDriver(ContainerDriver):
    """Runs docker commands for container and volume management."""

    def __init__(
        self,
        host: Optional[str] = None,
        context: Optional[str] = None,
        mock: bool = False,
        timeout: int = 120,
    ):
        """
        Initialize docker driver.

        Args:
            host: Docker host URL (tcp://host:2375, ssh://user@host)
                  If None, uses default Docker socket
            context: Docker context name to use
            mock: Keep containers and volumes in memory instead of calling docker
            timeout: Seconds before a docker command is abandoned
        """
        super().__init__(mock=mock)
        self.host = host
        self.context = context
        self.timeout = timeout
        self._mock_containers: Dict[str, ContainerInfo] = {}
        self._mock_volumes: Set[str] = set()
        self._volume_capability: Optional[VolumeCapability] = None

    def _run_docker(self, args: List[str], check: bool = True) -> Optional[str]:
        """
        Run docker command with host/context configuration.

        Args:
            args: Docker command arguments
            check: Raise DockerError on failure instead of returning None

        Returns:
            Command output or None if failed
        """
        cmd = ['docker']

        if self.context:
            cmd.extend(['--context', self.context])
        elif self.host:
            cmd.extend(['--host', self.host])

        cmd.extend(args)
        logger.debug(f"Command: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
                timeout=self.timeout
            )
            return result.stdout.strip() if result.returncode == 0 else None
        except subprocess.CalledProcessError as e:
            if check:
                raise DockerError(f"Docker command failed: {(e.stderr or '').strip()}") from e
            return None
        except subprocess.TimeoutExpired as e:
            if check:
                raise DockerError(f"Docker command timed out: {' '.join(args)}") from e
            return None
        except FileNotFoundError as e:
            raise DockerError("docker executable not found in PATH") from e

    def api_version(self) -> Optional[str]:
        """Docker server API version, e.g. '1.43'."""
        if self.mock:
            return None
        return self._run_docker(['version', '--format', '{{.Server.APIVersion}}'], check=False)

    def volume_capability(self) -> VolumeCapability:
        if self._volume_capability is None:
            self._volume_capability = detect_volume_support(self)
        return self._volume_capability

    # Containers

    def get_container(self, name: str) -> Optional[ContainerInfo]:
        if self.mock:
            return self._mock_containers.get(name)

        output = self._run_docker(['container', 'inspect', '--format', '{{json .}}', name], check=False)
        if not output:
            return None

        try:
            data = json.loads(output.splitlines()[0])
        except json.JSONDecodeError as e:
            raise DockerError(f"Unexpected docker inspect output for {name}") from e

        return ContainerInfo(
            id=data.get('Id', ''),
            name=data.get('Name', name).lstrip('/'),
            image=data.get('Config', {}).get('Image', ''),
            status=data.get('State', {}).get('Status', 'unknown'),
        )

    def create_container(self, spec: ContainerSpec) -> ContainerInfo:
        if self.mock:
            logger.info(f"MOCK: Would create container {spec.name} from {spec.image}")
            info = ContainerInfo(id=f"mock-{spec.name}", name=spec.name, image=spec.image, status="created")
            self._mock_containers[spec.name] = info
            return info

        self._ensure_image(spec.image)

        args = ['create', '--name', spec.name]
        for key, value in spec.env.items():
            args.extend(['-e', f'{key}={value}'])
        for volume in spec.volumes:
            args.extend(['-v', volume])
        for port in spec.ports:
            args.extend(['-p', port])
        if spec.restart:
            args.extend(['--restart', spec.restart])
        args.append(spec.image)
        args.extend(spec.command)

        logger.info(f"Creating container {spec.name} from {spec.image}")
        self._run_docker(args)

        info = self.get_container(spec.name)
        if info is None:
            raise DockerError(f"Container {spec.name} was not found after creation")
        return info

    def _ensure_image(self, image: str) -> None:
        if self._run_docker(['image', 'inspect', image], check=False) is not None:
            return
        logger.info(f"Pulling image {image}")
        self._run_docker(['pull', image])

    def remove_container(self, name: str) -> bool:
        if self.mock:
            if self._mock_containers.pop(name, None) is None:
                return False
            logger.info(f"MOCK: Would remove container {name}")
            return True

        if self.get_container(name) is None:
            logger.debug(f"Container {name} does not exist, nothing to remove")
            return False

        self._run_docker(['rm', '--force', name])
        logger.info(f"Removed container {name}")
        return True

    def inspect(self, name: str) -> ContainerState:
        info = self.get_container(name)
        if info is None:
            raise DockerError(f"Container {name} not found")
        return ContainerState(running=info.is_running, status=info.status)

    def start(self, name: str) -> None:
        if self.mock:
            info = self._mock_containers.get(name)
            if info is None:
                raise DockerError(f"Container {name} not found")
            info.status = "running"
            logger.info(f"MOCK: Would start container {name}")
            return

        self._run_docker(['start', name])
        logger.info(f"Started container {name}")

    # Volumes

    def has_volume(self, name: str) -> bool:
        if self.mock:
            return name in self._mock_volumes
        return self._run_docker(['volume', 'inspect', name], check=False) is not None

    def create_volume(self, name: str) -> None:
        if self.mock:
            self._mock_volumes.add(name)
            logger.info(f"MOCK: Would create volume {name}")
            return

        self._run_docker(['volume', 'create', name])
        logger.info(f"Created volume {name}")

    def remove_volume(self, name: str) -> None:
        if self.mock:
            self._mock_volumes.discard(name)
            logger.info(f"MOCK: Would remove volume {name}")
            return

        self._run_docker(['volume', 'rm', name])
        logger.info(f"Removed volume {name}")
