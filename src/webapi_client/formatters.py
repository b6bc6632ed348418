"""
Content formatters for WebApiClient.

A formatter turns entities into request bodies and response bodies back into
entities for one media type:
- JsonFormatter: orjson encoding with pydantic validation
- XmlFormatter: element-per-field XML, parsed with defusedxml
"""

import collections.abc
import dataclasses
import types
import typing
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, Optional, Type, TypeVar, Union
from xml.etree.ElementTree import Element, SubElement, tostring

import orjson
from defusedxml import ElementTree
from pydantic import BaseModel, TypeAdapter

T = TypeVar("T")

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, collections.abc.Sequence)
_UNION_ORIGINS = (Union, types.UnionType)


@lru_cache(maxsize=256)
def get_type_adapter(type_: Any) -> TypeAdapter:
    """Return a cached TypeAdapter for the given type."""
    return TypeAdapter(type_)


def type_name(type_: Any) -> str:
    """Name used for the root element of a serialized value of the given type."""
    origin = typing.get_origin(type_)
    if origin in _SEQUENCE_ORIGINS:
        args = typing.get_args(type_)
        return f"ArrayOf{type_name(args[0]) if args else 'Item'}"
    return getattr(type_, "__name__", "Item")


class BaseFormatter(ABC):
    """Abstract base class for content formatters."""

    media_type: str = ""

    @abstractmethod
    def serialize(self, obj: Any, type_: Optional[Type[Any]] = None) -> bytes:
        """Serialize an object into a request body."""
        pass

    @abstractmethod
    def deserialize(self, content: bytes, type_: Type[T]) -> T:
        """Deserialize a response body into an instance of type_."""
        pass

    def _dump(self, obj: Any, type_: Optional[Type[Any]]) -> Any:
        adapter = get_type_adapter(type_ if type_ is not None else type(obj))
        return adapter.dump_python(obj, mode="json", by_alias=True)


class JsonFormatter(BaseFormatter):
    """Formatter for application/json content."""

    media_type = "application/json"

    def serialize(self, obj: Any, type_: Optional[Type[Any]] = None) -> bytes:
        return orjson.dumps(self._dump(obj, type_))

    def deserialize(self, content: bytes, type_: Type[T]) -> T:
        return get_type_adapter(type_).validate_python(orjson.loads(content))


class XmlFormatter(BaseFormatter):
    """
    Formatter for application/xml content.

    Entities are written as one element named after the type with one child
    element per field. Sequences are written as ``ArrayOf<Type>`` with one child
    per item. Fields set to None are omitted.
    """

    media_type = "application/xml"

    def serialize(self, obj: Any, type_: Optional[Type[Any]] = None) -> bytes:
        type_ = type_ if type_ is not None else type(obj)
        root = Element(type_name(type_))

        data = self._dump(obj, type_)
        if isinstance(data, list):
            args = typing.get_args(type_)
            item_tag = type_name(args[0]) if args else "Item"
            for item in data:
                self._append(root, item_tag, item)
        else:
            self._fill(root, data)

        return tostring(root, encoding="utf-8", xml_declaration=True)

    def deserialize(self, content: bytes, type_: Type[T]) -> T:
        root = ElementTree.fromstring(content)
        return get_type_adapter(type_).validate_python(self._to_python(root, type_))

    def _fill(self, element: Element, value: Any) -> None:
        if isinstance(value, dict):
            for key, item in value.items():
                self._append(element, str(key), item)
        elif isinstance(value, list):
            for item in value:
                self._append(element, "Item", item)
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        else:
            element.text = str(value)

    def _append(self, parent: Element, tag: str, value: Any) -> None:
        if value is None:
            return
        self._fill(SubElement(parent, tag), value)

    def _to_python(self, element: Element, annotation: Any) -> Any:
        origin = typing.get_origin(annotation)

        if origin in _UNION_ORIGINS:
            args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
            annotation = args[0] if args else None
            origin = typing.get_origin(annotation)

        if origin in _SEQUENCE_ORIGINS or annotation in (list, tuple, set):
            args = typing.get_args(annotation)
            item_type = args[0] if args else None
            return [self._to_python(child, item_type) for child in element]

        if origin is dict or annotation is dict:
            args = typing.get_args(annotation)
            value_type = args[1] if len(args) == 2 else None
            return {child.tag: self._to_python(child, value_type) for child in element}

        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            fields = {
                (info.alias or name): info.annotation
                for name, info in annotation.model_fields.items()
            }
            return {child.tag: self._to_python(child, fields.get(child.tag)) for child in element}

        if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
            hints = typing.get_type_hints(annotation)
            return {child.tag: self._to_python(child, hints.get(child.tag)) for child in element}

        if len(element) == 0:
            if annotation is str:
                return element.text or ""
            return element.text

        return self._to_generic(element)

    def _to_generic(self, element: Element) -> Union[str, None, Dict[str, Any]]:
        if len(element) == 0:
            return element.text

        result: Dict[str, Any] = {}
        for child in element:
            value = self._to_generic(child)
            if child.tag in result:
                # Repeated tags collapse into a list
                existing = result[child.tag]
                if not isinstance(existing, list):
                    result[child.tag] = [existing]
                result[child.tag].append(value)
            else:
                result[child.tag] = value
        return result

