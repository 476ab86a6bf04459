"""Explicit API defaults for the objects the injector adds to a Pod.

The API server fills these in on admission anyway. Emitting them up front
keeps the injected container and volume identical to what ends up stored.
"""

from typing import Tuple

from secret_injector.models import Container, EmptyDirVolumeSource, Volume

TERMINATION_MESSAGE_PATH = "/dev/termination-log"
TERMINATION_MESSAGE_POLICY = "File"


def default_pull_policy(image: str) -> str:
    """``Always`` for ``latest`` or untagged images, ``IfNotPresent`` otherwise."""
    if "@" in image:
        return "IfNotPresent"
    last = image.rsplit("/", 1)[-1]
    if ":" not in last or last.rsplit(":", 1)[1] == "latest":
        return "Always"
    return "IfNotPresent"


def apply_defaults(container: Container, volume: Volume) -> Tuple[Container, Volume]:
    container = container.model_copy(deep=True)
    volume = volume.model_copy(deep=True)

    if container.termination_message_path is None:
        container.termination_message_path = TERMINATION_MESSAGE_PATH
    if container.termination_message_policy is None:
        container.termination_message_policy = TERMINATION_MESSAGE_POLICY
    if container.image_pull_policy is None and container.image:
        container.image_pull_policy = default_pull_policy(container.image)

    if not volume.has_source():
        volume.empty_dir = EmptyDirVolumeSource()

    return container, volume
