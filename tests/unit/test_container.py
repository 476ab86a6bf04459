import pytest

from secret_injector.admission.container import transform_container
from secret_injector.exceptions import MissingCommandError
from secret_injector.models import Container

MOUNT = {"name": "op-bin", "mountPath": "/op/bin/", "readOnly": True}


def test_command_is_wrapped_with_op_run():
    container = Container(name="app", command=["/bin/server", "--port", "8080"])

    mutated, patch = transform_container(container, 0, "/spec/containers")

    assert mutated.command == ["/op/bin/op", "run", "--", "/bin/server", "--port", "8080"]
    assert patch[1].to_json() == {
        "op": "replace",
        "path": "/spec/containers/0/command",
        "value": ["/op/bin/op", "run", "--", "/bin/server", "--port", "8080"],
    }


def test_first_volume_mount_is_a_one_element_sequence():
    container = Container(name="app", command=["/bin/server"])

    _, patch = transform_container(container, 2, "/spec/containers")

    assert patch[0].to_json() == {"op": "add", "path": "/spec/containers/2/volumeMounts", "value": [MOUNT]}


def test_volume_mount_is_appended_to_existing_mounts():
    container = Container.model_validate({
        "name": "app",
        "command": ["/bin/server"],
        "volumeMounts": [{"name": "data", "mountPath": "/data"}],
    })

    mutated, patch = transform_container(container, 1, "/spec/initContainers")

    assert patch[0].to_json() == {"op": "add", "path": "/spec/initContainers/1/volumeMounts/-", "value": MOUNT}
    assert [mount.name for mount in mutated.volume_mounts] == ["data", "op-bin"]


def test_input_container_is_left_untouched():
    container = Container(name="app", command=["/bin/server"])

    transform_container(container, 0, "/spec/containers")

    assert container.command == ["/bin/server"]
    assert container.volume_mounts == []


def test_missing_command_is_an_error():
    container = Container(name="app", image="registry.local/app:1.0", args=["--port", "8080"])

    with pytest.raises(MissingCommandError, match="container app: the podspec does not define a command"):
        transform_container(container, 0, "/spec/containers")
