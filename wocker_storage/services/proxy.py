"""Reverse proxy that routes ``VIRTUAL_HOST`` names to storage containers."""
from wocker_storage.core.logger import get_logger
from wocker_storage.services.driver.base import ContainerDriver, ContainerSpec

logger = get_logger(__name__)

PROXY_CONTAINER_NAME = "proxy.ws"
PROXY_IMAGE = "nginxproxy/nginx-proxy:latest"


class ReverseProxy:
    """Keeps the shared nginx-proxy container up.

    nginx-proxy watches the docker socket and regenerates its routes when
    containers with ``VIRTUAL_HOST`` start, so making sure it runs is enough
    to (re)register a storage.
    """

    def __init__(self, driver: ContainerDriver, http_port: int = 80):
        self.driver = driver
        self.http_port = http_port

    def spec(self) -> ContainerSpec:
        return ContainerSpec(
            name=PROXY_CONTAINER_NAME,
            image=PROXY_IMAGE,
            volumes=["/var/run/docker.sock:/tmp/docker.sock:ro"],
            ports=[f"{self.http_port}:80"],
            restart="always",
        )

    def start(self) -> None:
        if self.driver.get_container(PROXY_CONTAINER_NAME) is None:
            logger.info(f"Creating reverse proxy container {PROXY_CONTAINER_NAME}")
            self.driver.create_container(self.spec())

        if self.driver.inspect(PROXY_CONTAINER_NAME).running:
            logger.debug("Reverse proxy already running")
            return

        self.driver.start(PROXY_CONTAINER_NAME)
        logger.info("Reverse proxy started")
