from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from loguru import logger
from pydantic import ValidationError

from secret_injector.admission.container import (
    BIN_VOLUME_MOUNT_PATH,
    BIN_VOLUME_NAME,
    transform_container,
)
from secret_injector.admission.credentials import inject_credentials, missing_connect_env
from secret_injector.admission.defaults import apply_defaults
from secret_injector.admission.policy import (
    INJECT_ANNOTATION,
    INJECTED,
    INJECTION_STATUS_ANNOTATION,
    mutation_required,
    resolve_version,
    select_targets,
)
from secret_injector.config import InjectorConfig
from secret_injector.exceptions import MissingCommandError
from secret_injector.models import Container, EmptyDirVolumeSource, Pod, Volume, VolumeMount
from secret_injector.patch import PatchOperation, ScalarValue, add_all, upsert_annotation

INIT_CONTAINERS_PATH = "/spec/initContainers"
CONTAINERS_PATH = "/spec/containers"
VOLUMES_PATH = "/spec/volumes"

BIN_INIT_CONTAINER_NAME = "copy-op-bin"


@dataclass(frozen=True)
class Skip:
    reason: str


@dataclass(frozen=True)
class Mutate:
    patch: List[PatchOperation]
    # Local preview of the Pod after injection
    pod: Pod = field(compare=False)


@dataclass(frozen=True)
class Reject:
    message: str


Outcome = Union[Skip, Mutate, Reject]


def bin_volume() -> Volume:
    return Volume(name=BIN_VOLUME_NAME, empty_dir=EmptyDirVolumeSource(medium="Memory"))


class SecretInjector:
    """Decides whether a Pod needs the op CLI and builds the patch that adds it."""

    def __init__(self, config: InjectorConfig):
        self.config = config

    def bin_init_container(self, version: str) -> Container:
        """Init container that copies the op binary into the shared volume."""
        return Container(
            name=BIN_INIT_CONTAINER_NAME,
            image=f"{self.config.op_image}:{version}",
            image_pull_policy="IfNotPresent",
            command=["sh", "-c", f"cp /usr/local/bin/op {BIN_VOLUME_MOUNT_PATH}"],
            volume_mounts=[VolumeMount(name=BIN_VOLUME_NAME, mount_path=BIN_VOLUME_MOUNT_PATH)],
        )

    def evaluate(self, raw_object: Optional[Dict[str, Any]], namespace: Optional[str] = None) -> Outcome:
        """Decode the admitted object and run the mutation on it.

        Pods created through a controller often carry no namespace of their own,
        so the namespace of the admission request is used in that case.
        """
        if not isinstance(raw_object, dict):
            logger.error("Admission request does not carry an object")
            return Reject("admission request does not carry an object")
        try:
            pod = Pod.model_validate(raw_object)
        except ValidationError as e:
            logger.error(f"Could not unmarshal raw object: {e}")
            return Reject(str(e))
        if pod.metadata.namespace is None:
            pod.metadata.namespace = namespace
        return self.mutate(pod)

    def mutate(self, pod: Pod) -> Outcome:
        metadata = pod.metadata
        if not mutation_required(self.config.ignored_namespaces, metadata):
            logger.info(f"Skipping mutation for {metadata.namespace}/{metadata.display_name} due to policy check")
            return Skip("policy check")

        targets = select_targets((metadata.annotations or {}).get(INJECT_ANNOTATION))
        if not targets:
            logger.info(f"No mutations made for {metadata.namespace}/{metadata.display_name}")
            return Skip("no containers selected")

        preview = pod.model_copy(deep=True)
        try:
            init_patch, init_mutated = self._mutate_containers(
                preview.spec.init_containers, targets, INIT_CONTAINERS_PATH
            )
            patch, mutated = self._mutate_containers(preview.spec.containers, targets, CONTAINERS_PATH)
        except MissingCommandError as e:
            logger.error(f"Error occurred mutating container: {e}")
            return Reject(str(e))

        if not (init_mutated or mutated):
            logger.info(f"No mutations made for {metadata.namespace}/{metadata.display_name}")
            return Skip("no targeted container found")

        patch = init_patch + patch + self._pod_patch(
            pod, preview, resolve_version(metadata.annotations), init_mutated
        )
        logger.debug(f"Patch for {metadata.namespace}/{metadata.display_name}: {[op.to_json() for op in patch]}")
        return Mutate(patch=patch, pod=preview)

    def _mutate_containers(
        self, containers: List[Container], targets: Set[str], base_path: str
    ) -> Tuple[List[PatchOperation], bool]:
        patch = []
        mutated = False
        for index, container in enumerate(containers):
            if container.name not in targets:
                continue
            rewritten, container_patch = transform_container(container, index, base_path)
            patch.extend(container_patch)
            credentials = (
                self.config.connect_host,
                self.config.connect_token_name,
                self.config.connect_token_key,
            )
            patch.extend(inject_credentials(container, index, base_path, *credentials))
            rewritten.env.extend(missing_connect_env(container, *credentials))
            containers[index] = rewritten
            mutated = True
        return patch, mutated

    def _pod_patch(self, pod: Pod, preview: Pod, version: str, init_mutated: bool) -> List[PatchOperation]:
        """Object level operations, added once regardless of how many containers changed.

        The bootstrap container must run before any wrapped init container, so it
        goes first in that case. Indexed container operations precede it in the
        patch and are unaffected by the insert.
        """
        init_container, volume = apply_defaults(self.bin_init_container(version), bin_volume())

        patch = add_all(pod.spec.volumes, [volume], VOLUMES_PATH)
        if init_mutated:
            patch.append(
                PatchOperation(op="add", path=f"{INIT_CONTAINERS_PATH}/0", value=ScalarValue(init_container))
            )
            preview.spec.init_containers.insert(0, init_container)
        else:
            patch += add_all(pod.spec.init_containers, [init_container], INIT_CONTAINERS_PATH)
            preview.spec.init_containers.append(init_container)
        patch.append(upsert_annotation(pod.metadata.annotations, INJECTION_STATUS_ANNOTATION, INJECTED))

        preview.spec.volumes.append(volume)
        annotations = dict(preview.metadata.annotations or {})
        annotations[INJECTION_STATUS_ANNOTATION] = INJECTED
        preview.metadata.annotations = annotations
        return patch
