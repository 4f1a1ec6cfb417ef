"""Translation of mapped operations into HTTP request descriptors.

The builder is pure: given the base URL, the mapping and an entity it
computes the URL, method, headers and body. It never performs I/O and holds
no mutable state, so one instance can be shared by concurrent calls.

Pipeline for a call ``build(kind, type_name, entity)``:

1. rewrite    - ``rewriteUrl`` replaces the type name as the path template
2. translate  - every ``$key`` of the translation map is substituted
3. insert     - (get/list/assoc) the ``insert`` field's value is spliced
                right after the first occurrence of the field name
4. compose    - base path + template, repeated slashes collapsed
5. append     - (update/delete/get) entity value of the append field
6. query      - (get/list) declared ``query`` fields present on the entity
7. body       - entity (insert/update), ``data`` field (assoc), none otherwise
8. method     - directive override or the kind's default
"""

import json
import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from core.mapping.config import Directive, MappingConfig, OperationKind, TranslationMap
from core.observability.logging import get_logger

logger = get_logger(__name__)


DEFAULT_METHODS: Mapping[OperationKind, str] = MappingProxyType({
    OperationKind.INSERT: "POST",
    OperationKind.UPDATE: "PUT",
    OperationKind.DELETE: "DELETE",
    OperationKind.GET: "GET",
    OperationKind.LIST: "GET",
    OperationKind.ASSOC: "POST",
})

DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType({"Content-Type": "application/json"})

DEFAULT_APPEND_FIELD = "id"

_APPEND_KINDS = frozenset({OperationKind.UPDATE, OperationKind.DELETE, OperationKind.GET})
_INSERT_KINDS = frozenset({OperationKind.GET, OperationKind.LIST, OperationKind.ASSOC})
_QUERY_KINDS = frozenset({OperationKind.GET, OperationKind.LIST})
_ENTITY_BODY_KINDS = frozenset({OperationKind.INSERT, OperationKind.UPDATE})

# RFC 3986 pchar minus the unreserved set, which quote() keeps anyway
_PATH_SAFE = "!$&'()*+,;=:@"

_REPEATED_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True)
class RequestDescriptor:
    """A single HTTP request produced for one operation call.

    ``has_body`` separates "no body" (delete/get/list) from an explicit
    null body (assoc without ``data``), where ``body`` is None but present.
    """
    url: str
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    has_body: bool = False
    options: Mapping[str, Any] = field(default_factory=dict)

    def with_defaults(
        self,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "RequestDescriptor":
        """Return a copy with client-wide headers and transport options merged in.

        Given values win over the descriptor's own.
        """
        merged_headers = dict(self.headers)
        merged_headers.update(headers or {})
        merged_options = dict(self.options)
        merged_options.update(options or {})
        return replace(
            self,
            headers=MappingProxyType(merged_headers),
            options=MappingProxyType(merged_options),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "url": self.url,
            "method": self.method,
            "headers": dict(self.headers),
        }
        if self.has_body:
            data["body"] = self.body
        return data


def serialize_body(value: Any) -> str:
    """Compact JSON, matching what REST APIs usually expect (``{"a":1}``)."""
    return json.dumps(value, separators=(",", ":"), default=str)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _query_value(value: Any):
    if isinstance(value, (list, tuple)):
        return [_stringify(v) for v in value]
    return _stringify(value)


def join_path(*parts: str) -> str:
    """Join URL path parts with single separators.

    Empty parts are skipped, repeated slashes collapse, the result always
    starts with ``/`` and a trailing slash on the last part is kept.
    """
    joined = "/".join(p for p in parts if p)
    joined = _REPEATED_SLASHES.sub("/", joined)
    if not joined.startswith("/"):
        joined = "/" + joined
    return joined


def insert_field(template: str, field_name: str, value: Any) -> str:
    """Splice ``value`` right after the first occurrence of ``field_name``.

    >>> insert_field("media/text/words", "text", 10)
    'media//text/10//words'

    The doubled separators collapse when the path is composed, giving
    ``media/text/10/words``. A template that does not contain the field
    name is returned unchanged.
    """
    idx = template.find(field_name)
    if idx < 0:
        return template
    encoded = quote(_stringify(value), safe=_PATH_SAFE)
    return (
        template[:idx]
        + "/" + field_name + "/" + encoded + "/"
        + template[idx + len(field_name):]
    )


class UrlBuilder:
    """Builds RequestDescriptors from mapped operations.

    Usage:
        builder = UrlBuilder("http://h/api", {"get": {"video": {}}})
        descriptor = builder.build_get("video", {"id": 17})
        descriptor.url  # "http://h/api/video/17"
    """

    def __init__(
        self,
        base_url: str,
        mapping: Union[MappingConfig, Mapping[str, Any], None] = None,
        translation_map: Optional[Mapping[str, Any]] = None,
        default_headers: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the builder.

        Args:
            base_url: Base URL for every request; may carry a path and query
            mapping: Raw or normalized mapping configuration
            translation_map: ``$placeholder`` substitutions for templates
            default_headers: Headers for every request (JSON content type if None)
        """
        parts = urlsplit(base_url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"base_url must be an absolute URL, got {base_url!r}")

        self._base_url = base_url
        self._scheme = parts.scheme
        self._netloc = parts.netloc
        self._base_path = parts.path
        self._base_query: Tuple[Tuple[str, str], ...] = tuple(
            parse_qsl(parts.query, keep_blank_values=True)
        )
        self._mapping = MappingConfig.normalize(mapping)
        if isinstance(translation_map, TranslationMap):
            self._translation_map = translation_map
        else:
            self._translation_map = TranslationMap(translation_map)
        self._default_headers = MappingProxyType(
            dict(DEFAULT_HEADERS if default_headers is None else default_headers)
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def mapping(self) -> MappingConfig:
        return self._mapping

    @property
    def translation_map(self) -> TranslationMap:
        return self._translation_map

    def build(
        self,
        kind: Union[OperationKind, str],
        type_name: str,
        entity: Optional[Mapping[str, Any]] = None,
    ) -> Optional[RequestDescriptor]:
        """Translate an operation call into a request descriptor.

        Args:
            kind: Operation kind
            type_name: Type name to look up in the mapping
            entity: Entity being operated on

        Returns:
            RequestDescriptor, or None if the type name is not mapped
        """
        kind = OperationKind(kind)
        entity = entity if entity is not None else {}
        directive = self._mapping.directive_for(kind, type_name)
        if directive is None:
            return None

        template = directive.rewrite_url or type_name
        template = self._translation_map.apply(template)

        if kind in _INSERT_KINDS and directive.insert:
            template = self._insert(template, directive.insert, entity, type_name)

        append = ""
        if kind in _APPEND_KINDS:
            append = self._append_segment(directive, entity, type_name)

        path = join_path(self._base_path, template, append)

        query: List[Tuple[str, Any]] = list(self._base_query)
        if kind in _QUERY_KINDS:
            query.extend(self._query_params(directive, entity).items())

        url = urlunsplit((
            self._scheme,
            self._netloc,
            path,
            urlencode(query, doseq=True),
            "",
        ))

        body: Optional[str] = None
        has_body = False
        if kind in _ENTITY_BODY_KINDS:
            body, has_body = serialize_body(entity), True
        elif kind == OperationKind.ASSOC:
            has_body = True
            if directive.data and entity.get(directive.data) is not None:
                body = serialize_body(entity[directive.data])

        descriptor = RequestDescriptor(
            url=url,
            method=directive.method or DEFAULT_METHODS[kind],
            headers=self._default_headers,
            body=body,
            has_body=has_body,
        )

        logger.debug(
            f"Translated {kind.value} {type_name} to {descriptor.method} {descriptor.url}",
            extra_fields={"operation": kind.value, "type_name": type_name},
        )
        return descriptor

    def build_insert(self, type_name: str, entity: Mapping[str, Any]) -> Optional[RequestDescriptor]:
        return self.build(OperationKind.INSERT, type_name, entity)

    def build_update(self, type_name: str, entity: Mapping[str, Any]) -> Optional[RequestDescriptor]:
        return self.build(OperationKind.UPDATE, type_name, entity)

    def build_delete(self, type_name: str, entity: Mapping[str, Any]) -> Optional[RequestDescriptor]:
        return self.build(OperationKind.DELETE, type_name, entity)

    def build_get(self, type_name: str, entity: Mapping[str, Any]) -> Optional[RequestDescriptor]:
        return self.build(OperationKind.GET, type_name, entity)

    def build_list(self, type_name: str, entity: Mapping[str, Any]) -> Optional[RequestDescriptor]:
        return self.build(OperationKind.LIST, type_name, entity)

    def build_assoc(self, type_name: str, entity: Mapping[str, Any]) -> Optional[RequestDescriptor]:
        return self.build(OperationKind.ASSOC, type_name, entity)

    def _insert(self, template: str, field_name: str, entity: Mapping[str, Any], type_name: str) -> str:
        value = entity.get(field_name)
        if value is None:
            logger.warning(
                f"Entity has no '{field_name}' to insert into {type_name}; path left as is"
            )
            return template
        return insert_field(template, field_name, value)

    def _append_segment(self, directive: Directive, entity: Mapping[str, Any], type_name: str) -> str:
        field_name = directive.append.resolve(DEFAULT_APPEND_FIELD)
        if field_name is None:
            return ""
        value = entity.get(field_name)
        if value is None:
            logger.warning(
                f"Entity has no '{field_name}' to append to {type_name}; segment skipped"
            )
            return ""
        return quote(_stringify(value), safe=_PATH_SAFE)

    @staticmethod
    def _query_params(directive: Directive, entity: Mapping[str, Any]) -> Dict[str, Any]:
        """Declared query fields present on the entity, in declared order."""
        query: Dict[str, Any] = {}
        for name in directive.query:
            if entity.get(name) is not None:
                query[name] = _query_value(entity[name])
        return query
