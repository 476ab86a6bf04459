"""JSON Patch (RFC 6902) building blocks.

A patch value is one of three shapes. ``ScalarValue`` is a single JSON value:
a string, a command list being replaced wholesale, or one element appended to
an existing array. ``CollectionValue`` is a new array, used when the target
array does not exist yet. ``MapValue`` is a new object, used when the target
map does not exist yet.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Union

import orjson
from pydantic import BaseModel

from secret_injector.exceptions import EncodeError


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        to_json = getattr(value, "to_json", None)
        if to_json is not None:
            return to_json()
        return value.model_dump(by_alias=True, exclude_none=True, mode="json")
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


@dataclass(frozen=True)
class ScalarValue:
    value: Any

    def to_json(self) -> Any:
        return _to_json(self.value)


@dataclass(frozen=True)
class CollectionValue:
    items: List[Any] = field(default_factory=list)

    def to_json(self) -> List[Any]:
        return [_to_json(item) for item in self.items]


@dataclass(frozen=True)
class MapValue:
    entries: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {key: _to_json(value) for key, value in self.entries.items()}


PatchValue = Union[ScalarValue, CollectionValue, MapValue]


@dataclass(frozen=True)
class PatchOperation:
    op: Literal["add", "replace"]
    path: str
    value: PatchValue

    def to_json(self) -> Dict[str, Any]:
        return {"op": self.op, "path": self.path, "value": self.value.to_json()}


def escape_pointer(token: str) -> str:
    """Escape a single JSON pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def add_or_append(target_is_empty: bool, base_path: str, element: Any) -> PatchOperation:
    """Add ``element`` to the collection at ``base_path``.

    An empty (or missing) target cannot be appended to, so the collection is
    created holding just ``element``.
    """
    if target_is_empty:
        return PatchOperation(op="add", path=base_path, value=CollectionValue([element]))
    return PatchOperation(op="add", path=f"{base_path}/-", value=ScalarValue(element))


def add_all(target: Optional[Iterable[Any]], added: Iterable[Any], base_path: str) -> List[PatchOperation]:
    """Add every element of ``added`` to ``target``, preserving order."""
    first = not target
    patch = []
    for element in added:
        patch.append(add_or_append(first, base_path, element))
        first = False
    return patch


def upsert_annotation(existing: Optional[Mapping[str, str]], key: str, value: str) -> PatchOperation:
    """Set ``key`` to ``value`` in ``/metadata/annotations``.

    ``existing`` is None when the object has no annotations map at all.
    """
    if existing is None:
        return PatchOperation(op="add", path="/metadata/annotations", value=MapValue({key: value}))

    path = f"/metadata/annotations/{escape_pointer(key)}"
    if not existing.get(key):
        return PatchOperation(op="add", path=path, value=ScalarValue(value))
    return PatchOperation(op="replace", path=path, value=ScalarValue(value))


def patch_to_json(operations: Iterable[PatchOperation]) -> List[Dict[str, Any]]:
    return [operation.to_json() for operation in operations]


def encode_patch(operations: Iterable[PatchOperation]) -> bytes:
    """Serialize a patch document to compact JSON bytes."""
    try:
        return orjson.dumps(patch_to_json(operations))
    except TypeError as e:
        raise EncodeError(f"could not encode patch: {e}") from e
