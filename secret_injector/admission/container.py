from typing import List, Tuple

from secret_injector.exceptions import MissingCommandError
from secret_injector.models import Container, VolumeMount
from secret_injector.patch import PatchOperation, ScalarValue, add_or_append

# Shared in-memory volume holding the op binary
BIN_VOLUME_NAME = "op-bin"
BIN_VOLUME_MOUNT_PATH = "/op/bin/"

OP_COMMAND_PREFIX = [BIN_VOLUME_MOUNT_PATH + "op", "run", "--"]


def bin_volume_mount() -> VolumeMount:
    return VolumeMount(name=BIN_VOLUME_NAME, mount_path=BIN_VOLUME_MOUNT_PATH, read_only=True)


def transform_container(
    container: Container, index: int, base_path: str
) -> Tuple[Container, List[PatchOperation]]:
    """Wrap the container command with ``op run --`` and mount the op binary.

    Returns a rewritten copy of ``container`` along with the patch operations
    that apply the same change to the object at ``base_path/index``.
    """
    if not container.command:
        raise MissingCommandError(container.name)

    mount = bin_volume_mount()
    mutated = container.model_copy(deep=True)
    mutated.command = OP_COMMAND_PREFIX + list(container.command)

    patch = [
        add_or_append(not container.volume_mounts, f"{base_path}/{index}/volumeMounts", mount),
        PatchOperation(op="replace", path=f"{base_path}/{index}/command", value=ScalarValue(mutated.command)),
    ]
    mutated.volume_mounts.append(mount)

    return mutated, patch
