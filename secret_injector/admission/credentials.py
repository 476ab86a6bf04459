from typing import List, Tuple

from secret_injector.models import Container, EnvVar, EnvVarSource, SecretKeySelector
from secret_injector.patch import PatchOperation, add_all

CONNECT_HOST_ENV = "OP_CONNECT_HOST"
CONNECT_TOKEN_ENV = "OP_CONNECT_TOKEN"


def connect_configuration_set(container: Container) -> Tuple[bool, bool]:
    """Report whether the host and token variables are already defined."""
    names = {env.name for env in container.env}
    return CONNECT_HOST_ENV in names, CONNECT_TOKEN_ENV in names


def missing_connect_env(container: Container, host: str, secret_name: str, secret_key: str) -> List[EnvVar]:
    """Connect variables the user has not set. The token only ever comes from a secret reference."""
    host_set, token_set = connect_configuration_set(container)

    envs = []
    if not host_set:
        envs.append(EnvVar(name=CONNECT_HOST_ENV, value=host))
    if not token_set:
        envs.append(
            EnvVar(
                name=CONNECT_TOKEN_ENV,
                value_from=EnvVarSource(secret_key_ref=SecretKeySelector(name=secret_name, key=secret_key)),
            )
        )
    return envs


def inject_credentials(
    container: Container,
    index: int,
    base_path: str,
    host: str,
    secret_name: str,
    secret_key: str,
) -> List[PatchOperation]:
    envs = missing_connect_env(container, host, secret_name, secret_key)
    return add_all(container.env, envs, f"{base_path}/{index}/env")
