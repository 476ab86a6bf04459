from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

ADMISSION_API_VERSION = "admission.k8s.io/v1"
JSON_PATCH_TYPE = "JSONPatch"


class Status(BaseModel):
    message: str


class AdmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    uid: str
    kind: Optional[Dict[str, str]] = None
    namespace: Optional[str] = None
    name: Optional[str] = None
    operation: Optional[str] = None
    # Raw object, decoded into a Pod by the injector
    object: Optional[Dict[str, Any]] = None


class AdmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str = ""
    allowed: bool
    patch: Optional[str] = None
    patch_type: Optional[str] = Field(default=None, alias="patchType")
    status: Optional[Status] = None


class AdmissionReview(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_version: str = Field(default=ADMISSION_API_VERSION, alias="apiVersion")
    kind: str = "AdmissionReview"
    request: Optional[AdmissionRequest] = None
    response: Optional[AdmissionResponse] = None


class HealthResponse(BaseModel):
    status: str
    service: str
