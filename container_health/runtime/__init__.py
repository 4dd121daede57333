"""Container runtime — Docker Engine API client and response models."""

from .client import ContainerNotFound, DockerClient, RuntimeUnavailable
from .models import InspectResult, StatsSample
