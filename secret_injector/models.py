"""Pydantic models for the parts of a Pod the injector reads and writes.

Only the fields the injector needs are declared. Everything else is kept as an
extra so a preview copy of the Pod round-trips unchanged.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class K8sModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_json(self) -> Dict[str, Any]:
        """Dump using the API field names, leaving unset fields out."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SecretKeySelector(K8sModel):
    name: str
    key: str
    optional: Optional[bool] = None


class EnvVarSource(K8sModel):
    secret_key_ref: Optional[SecretKeySelector] = Field(default=None, alias="secretKeyRef")


class EnvVar(K8sModel):
    name: str
    value: Optional[str] = None
    value_from: Optional[EnvVarSource] = Field(default=None, alias="valueFrom")


class VolumeMount(K8sModel):
    name: str
    mount_path: str = Field(alias="mountPath")
    read_only: Optional[bool] = Field(default=None, alias="readOnly")


class Container(K8sModel):
    name: str
    image: Optional[str] = None
    image_pull_policy: Optional[str] = Field(default=None, alias="imagePullPolicy")
    command: List[str] = Field(default_factory=list)
    args: Optional[List[str]] = None
    env: List[EnvVar] = Field(default_factory=list)
    volume_mounts: List[VolumeMount] = Field(default_factory=list, alias="volumeMounts")
    termination_message_path: Optional[str] = Field(default=None, alias="terminationMessagePath")
    termination_message_policy: Optional[str] = Field(default=None, alias="terminationMessagePolicy")

    def to_json(self) -> Dict[str, Any]:
        data = super().to_json()
        # Empty lists mean "not set" on the API side.
        for key in ("command", "env", "volumeMounts"):
            if not data.get(key):
                data.pop(key, None)
        return data


class EmptyDirVolumeSource(K8sModel):
    medium: Optional[str] = None
    size_limit: Optional[str] = Field(default=None, alias="sizeLimit")


class Volume(K8sModel):
    name: str
    empty_dir: Optional[EmptyDirVolumeSource] = Field(default=None, alias="emptyDir")

    def has_source(self) -> bool:
        """True when any volume source is set, known or not."""
        if self.empty_dir is not None:
            return True
        return any(value is not None for value in (self.model_extra or {}).values())


class ObjectMeta(K8sModel):
    name: Optional[str] = None
    generate_name: Optional[str] = Field(default=None, alias="generateName")
    namespace: Optional[str] = None
    # None means the annotations map is absent, which is not the same as empty
    annotations: Optional[Dict[str, str]] = None

    @property
    def display_name(self) -> str:
        return self.name or self.generate_name or "<unnamed>"


class PodSpec(K8sModel):
    init_containers: List[Container] = Field(default_factory=list, alias="initContainers")
    containers: List[Container] = Field(default_factory=list)
    volumes: List[Volume] = Field(default_factory=list)


class Pod(K8sModel):
    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    kind: Optional[str] = None
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)
