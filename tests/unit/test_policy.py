import pytest

from secret_injector.admission.policy import mutation_required, resolve_version, select_targets
from secret_injector.models import ObjectMeta

IGNORED = ["kube-system", "kube-public"]


def meta(namespace="default", **annotations):
    return ObjectMeta(name="test-pod", namespace=namespace, annotations=annotations or None)


@pytest.mark.parametrize("namespace", IGNORED)
def test_ignored_namespaces_are_never_mutated(namespace):
    metadata = ObjectMeta(
        name="test-pod",
        namespace=namespace,
        annotations={"operator.1password.io/inject": "app"},
    )

    assert mutation_required(IGNORED, metadata) is False


def test_opt_in_required():
    assert mutation_required(IGNORED, meta()) is False
    assert mutation_required(IGNORED, meta(team="payments")) is False


def test_opted_in_pod_requires_mutation():
    metadata = ObjectMeta(namespace="default", annotations={"operator.1password.io/inject": "app"})

    assert mutation_required(IGNORED, metadata) is True


@pytest.mark.parametrize("status,required", [
    ("injected", False),
    ("INJECTED", False),
    ("Injected", False),
    ("stale", True),
    ("", True),
])
def test_status_annotation(status, required):
    metadata = ObjectMeta(
        namespace="default",
        annotations={"operator.1password.io/inject": "app", "operator.1password.io/status": status},
    )

    assert mutation_required(IGNORED, metadata) is required


def test_empty_opt_in_still_passes_policy():
    metadata = ObjectMeta(namespace="default", annotations={"operator.1password.io/inject": ""})

    assert mutation_required(IGNORED, metadata) is True
    assert select_targets("") == set()


@pytest.mark.parametrize("value,expected", [
    (None, set()),
    ("", set()),
    ("app", {"app"}),
    ("app,worker", {"app", "worker"}),
    (" app , worker ,,", {"app", "worker"}),
])
def test_select_targets(value, expected):
    assert select_targets(value) == expected


def test_resolve_version():
    assert resolve_version(None) == "latest"
    assert resolve_version({}) == "latest"
    assert resolve_version({"operator.1password.io/version": ""}) == "latest"
    assert resolve_version({"operator.1password.io/version": "2.24.0"}) == "2.24.0"
