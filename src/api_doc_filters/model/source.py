"""Describe Python callables and types as source metadata.

All type introspection happens here, once, when a framework describes its
endpoints. Filters only ever look at the resulting tags.
"""

import enum
import inspect
import types
import typing
from typing import Annotated, Any, Callable, get_args, get_origin, get_type_hints

from api_doc_filters.model.base import ApiDescription, ParameterDescription, Schema

EXCLUDE_MARKER = "doc-exclude"


class Undocumented:
    """Base class for parameter types that never show up in the docs.

    Typical subclasses are values injected by the framework (request context,
    cancellation tokens) rather than supplied by API clients.
    """


class DocExclude:
    """Marker hiding a parameter: ``Annotated[str, DocExclude]``."""

    tag = EXCLUDE_MARKER


def type_tag(tp: type | str) -> str:
    """Stable tag for a type; strings are taken as already-computed tags."""
    if isinstance(tp, str):
        return tp
    return f"{tp.__module__}.{tp.__qualname__}"


def _unwrap(annotation: Any) -> Any:
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    origin = get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        return _unwrap(args[0]) if len(args) == 1 else annotation
    return origin or annotation


def capabilities_of(annotation: Any) -> list[str]:
    """Tags of every class the annotated type is assignable to, most specific first."""
    base = _unwrap(annotation)
    if not inspect.isclass(base):
        return []
    return [type_tag(cls) for cls in inspect.getmro(base) if cls is not object]


def markers_of(annotation: Any) -> list[str]:
    """Marker tags attached with ``Annotated``, also inside ``Optional``/``X | None``."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return [m.tag for m in annotation.__metadata__ if isinstance(getattr(m, "tag", None), str)]
    if origin in (typing.Union, types.UnionType):
        return [tag for arg in get_args(annotation) for tag in markers_of(arg)]
    return []


def describe_parameter(name: str, annotation: Any, location: str = "query") -> ParameterDescription:
    base = _unwrap(annotation)
    return ParameterDescription(
        name=name,
        location=location,
        type_name=base.__name__ if inspect.isclass(base) else None,
        capabilities=capabilities_of(annotation),
        markers=markers_of(annotation),
    )


def describe_endpoint(
    func: Callable[..., Any],
    locations: dict[str, str] | None = None,
    declaring_type: str | None = None,
) -> ApiDescription:
    """Build the source description of an endpoint handler.

    ``locations`` maps parameter names to their location; unlisted parameters
    are query parameters. The declaring type defaults to the class part of the
    handler's qualified name.
    """
    locations = locations or {}
    hints = get_type_hints(func, include_extras=True)
    descriptions = []
    for name, param in inspect.signature(func).parameters.items():
        if name in ("self", "cls") or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        descriptions.append(describe_parameter(name, hints.get(name, Any), locations.get(name, "query")))

    if declaring_type is None:
        owner, _, _ = func.__qualname__.rpartition(".")
        owner = owner.rpartition(".")[2]
        declaring_type = owner if owner and owner != "<locals>" else None

    return ApiDescription(
        declaring_type=declaring_type,
        method_name=func.__name__,
        parameter_descriptions=descriptions,
    )


def enum_member_names(enum_type: type[enum.Enum]) -> list[str]:
    """Member names in declaration order, aliases included."""
    return list(enum_type.__members__)


def enum_schema(enum_type: type[enum.Enum]) -> Schema:
    values = [member.value for member in enum_type.__members__.values()]
    schema_type = "integer" if all(isinstance(v, int) for v in values) else "string"
    return Schema(type=schema_type, enum=values, enum_names=enum_member_names(enum_type))
