from typing import Iterable, Mapping, Optional, Set

from loguru import logger

from secret_injector.models import ObjectMeta

INJECTION_STATUS_ANNOTATION = "operator.1password.io/status"
INJECT_ANNOTATION = "operator.1password.io/inject"
VERSION_ANNOTATION = "operator.1password.io/version"

INJECTED = "injected"
DEFAULT_VERSION = "latest"


def mutation_required(ignored_namespaces: Iterable[str], metadata: ObjectMeta) -> bool:
    """Check whether the object opted in and has not been injected yet."""
    if metadata.namespace in set(ignored_namespaces):
        logger.info(
            f"Skip mutation for {metadata.display_name} for it's in special namespace: {metadata.namespace}"
        )
        return False

    annotations = metadata.annotations or {}
    status = annotations.get(INJECTION_STATUS_ANNOTATION, "")
    enabled = INJECT_ANNOTATION in annotations

    required = enabled and status.lower() != INJECTED

    logger.info(
        f"Mutation policy for {metadata.namespace}/{metadata.display_name}: "
        f"status: {status!r} required: {required}"
    )
    return required


def select_targets(opt_in: Optional[str]) -> Set[str]:
    """Split the inject annotation into the set of container names to mutate."""
    if not opt_in:
        return set()
    return {name.strip() for name in opt_in.split(",") if name.strip()}


def resolve_version(annotations: Optional[Mapping[str, str]]) -> str:
    """Tag of the op image to bootstrap from."""
    return (annotations or {}).get(VERSION_ANNOTATION) or DEFAULT_VERSION
