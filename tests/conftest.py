# conftest.py
"""
Shared test fixtures for the secret injector tests
"""

import base64
import json

import pytest

from secret_injector.admission.injector import SecretInjector
from secret_injector.config import InjectorConfig

CONFIG_ENV_VARS = [
    "BIND_ADDRESS", "PORT", "UDS_PATH", "TLS_CERT_PATH", "TLS_KEY_PATH", "DEBUG",
    "OP_CONNECT_HOST", "OP_CONNECT_TOKEN_NAME", "OP_CONNECT_TOKEN_KEY", "OP_IMAGE",
    "IGNORED_NAMESPACES",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the host environment out of the settings under test."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def injector_config() -> InjectorConfig:
    return InjectorConfig(
        connect_host="http://onepassword-connect:8080",
        connect_token_name="onepassword-token",
        connect_token_key="token",
    )


@pytest.fixture
def injector(injector_config) -> SecretInjector:
    """Create injector instance for testing."""
    return SecretInjector(injector_config)


@pytest.fixture
def opted_in_pod():
    """Pod asking for injection into its `app` container."""
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": "test-pod",
            "namespace": "default",
            "annotations": {
                "operator.1password.io/inject": "app"
            }
        },
        "spec": {
            "containers": [
                {
                    "name": "app",
                    "image": "registry.local/app:1.0",
                    "command": ["/bin/server"]
                }
            ]
        }
    }


@pytest.fixture
def pod_without_opt_in():
    """Pod without any injector annotation."""
    return {
        "kind": "Pod",
        "metadata": {
            "name": "test-pod",
            "namespace": "default",
            "annotations": {
                "team": "payments"
            }
        },
        "spec": {
            "containers": [
                {
                    "name": "app",
                    "image": "registry.local/app:1.0",
                    "command": ["/bin/server"]
                }
            ]
        }
    }


@pytest.fixture
def multi_container_pod():
    """Pod with init and main containers, some of them targeted."""
    return {
        "kind": "Pod",
        "metadata": {
            "name": "multi-container-pod",
            "namespace": "apps",
            "annotations": {
                "operator.1password.io/inject": "migrate,app,worker",
                "operator.1password.io/version": "2"
            }
        },
        "spec": {
            "initContainers": [
                {
                    "name": "migrate",
                    "image": "registry.local/migrate:1.0",
                    "command": ["/bin/migrate", "up"]
                }
            ],
            "containers": [
                {
                    "name": "sidecar",
                    "image": "registry.local/sidecar:1.0",
                    "command": ["/bin/sidecar"]
                },
                {
                    "name": "app",
                    "image": "registry.local/app:1.0",
                    "command": ["/bin/server", "--port", "8080"],
                    "env": [
                        {"name": "LOG_LEVEL", "value": "debug"}
                    ],
                    "volumeMounts": [
                        {"name": "data", "mountPath": "/data"}
                    ]
                },
                {
                    "name": "worker",
                    "image": "registry.local/worker:1.0",
                    "command": ["/bin/worker"],
                    "env": [
                        {"name": "OP_CONNECT_HOST", "value": "http://custom:8080"},
                        {
                            "name": "OP_CONNECT_TOKEN",
                            "valueFrom": {"secretKeyRef": {"name": "custom-token", "key": "t"}}
                        }
                    ]
                }
            ],
            "volumes": [
                {"name": "data", "emptyDir": {}}
            ]
        }
    }


def create_review(resource_object, uid="test-uid-123", operation="CREATE", api_version="admission.k8s.io/v1"):
    """Helper function to create an admission review."""
    return {
        "apiVersion": api_version,
        "kind": "AdmissionReview",
        "request": {
            "uid": uid,
            "kind": {"group": "", "version": "v1", "kind": "Pod"},
            "namespace": (resource_object or {}).get("metadata", {}).get("namespace"),
            "operation": operation,
            "object": resource_object
        }
    }


def decode_patch(response):
    """Decode the base64 JSON patch of an admission response."""
    return json.loads(base64.b64decode(response["patch"]))

