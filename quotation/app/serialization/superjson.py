"""
Rich-type JSON serialization.

Plain JSON cannot carry datetimes or arbitrary-precision decimals. This
module serializes a value into a JSON-safe tree plus a side table of
annotations recording, per path, which values must be revived on the
other end:

    {
        "json": {"createdAt": "2026-01-02T03:04:05.678000+00:00", ...},
        "meta": {"values": {"createdAt": "Date", "totalAmount": ["custom", "decimal"]}}
    }

Paths are dot-separated; literal dots inside keys are escaped as "\\.".
A rich root value has no path, so its annotation is stored as `values`
itself rather than in the path table.
Custom (recognize, serialize, deserialize) transformers are registered
by name and take precedence over built-in handling.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Tuple

DATE_ANNOTATION = "Date"
CUSTOM_ANNOTATION = "custom"


@dataclass(frozen=True)
class CustomTransformer:
    """A named (recognize, serialize, deserialize) triple."""

    name: str
    is_applicable: Callable[[Any], bool]
    serialize: Callable[[Any], Any]
    deserialize: Callable[[Any], Any]


# ---------------------------------------------------------------------------
# Path encoding
# ---------------------------------------------------------------------------


def _escape(segment: str) -> str:
    return segment.replace("\\", "\\\\").replace(".", "\\.")


def stringify_path(path: Tuple[str, ...]) -> str:
    return ".".join(_escape(segment) for segment in path)


def parse_path(text: str) -> List[str]:
    segments: List[str] = []
    current: List[str] = []
    chars = iter(text)
    for char in chars:
        if char == "\\":
            current.append(next(chars, ""))
        elif char == ".":
            segments.append("".join(current))
            current = []
        else:
            current.append(char)
    segments.append("".join(current))
    return segments


# ---------------------------------------------------------------------------
# Serializer
# ---------------------------------------------------------------------------


class SuperJSON:
    """Serializer with a registry of custom transformers."""

    def __init__(self) -> None:
        self._custom: Dict[str, CustomTransformer] = {}

    def register_custom(self, transformer: CustomTransformer) -> None:
        self._custom[transformer.name] = transformer

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def serialize(self, value: Any) -> Dict[str, Any]:
        annotations: Dict[Tuple[str, ...], Any] = {}
        result: Dict[str, Any] = {"json": self._walk(value, (), annotations)}
        if () in annotations:
            # A rich root value is annotated directly, without a path table.
            result["meta"] = {"values": annotations[()]}
        elif annotations:
            result["meta"] = {
                "values": {
                    stringify_path(path): annotation
                    for path, annotation in annotations.items()
                }
            }
        return result

    def _walk(
        self,
        value: Any,
        path: Tuple[str, ...],
        annotations: Dict[Tuple[str, ...], Any],
    ) -> Any:
        for transformer in self._custom.values():
            if transformer.is_applicable(value):
                annotations[path] = [
                    CUSTOM_ANNOTATION,
                    transformer.name,
                ]
                return transformer.serialize(value)

        if isinstance(value, datetime):
            annotations[path] = DATE_ANNOTATION
            return value.isoformat()

        if isinstance(value, Mapping):
            return {
                str(k): self._walk(v, path + (str(k),), annotations)
                for k, v in value.items()
            }

        if isinstance(value, (list, tuple)):
            return [
                self._walk(v, path + (str(i),), annotations)
                for i, v in enumerate(value)
            ]

        return value

    def stringify(self, value: Any) -> str:
        return json.dumps(self.serialize(value), ensure_ascii=False)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def deserialize(self, payload: Mapping[str, Any]) -> Any:
        value = copy.deepcopy(payload["json"])
        annotations = (payload.get("meta") or {}).get("values")
        if not annotations:
            return value
        if not isinstance(annotations, Mapping):
            return self._revive(value, annotations)

        for raw_path, annotation in annotations.items():
            self._revive_at(value, parse_path(raw_path), annotation)
        return value

    def _revive_at(self, root: Any, path: List[str], annotation: Any) -> None:
        parent = root
        for segment in path[:-1]:
            parent = parent[int(segment)] if isinstance(parent, list) else parent[segment]

        last = path[-1]
        key: Any = int(last) if isinstance(parent, list) else last
        parent[key] = self._revive(parent[key], annotation)

    def _revive(self, value: Any, annotation: Any) -> Any:
        if annotation == DATE_ANNOTATION:
            return datetime.fromisoformat(value)

        if isinstance(annotation, list) and annotation[:1] == [CUSTOM_ANNOTATION]:
            name = annotation[1]
            transformer = self._custom.get(name)
            if transformer is None:
                raise ValueError(f"No custom transformer registered as '{name}'")
            return transformer.deserialize(value)

        raise ValueError(f"Unsupported annotation: {annotation!r}")

    def parse(self, text: str) -> Any:
        return self.deserialize(json.loads(text))


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

superjson = SuperJSON()

superjson.register_custom(
    CustomTransformer(
        name="decimal",
        is_applicable=lambda v: isinstance(v, Decimal),
        serialize=lambda v: float(v),
        deserialize=lambda v: Decimal(str(v)),
    )
)
