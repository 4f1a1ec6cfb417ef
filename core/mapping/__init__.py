"""Core mapping - declarative translation of operations to REST requests.

The mapping configuration names, per operation kind, how each type name
becomes a URL, method and body. The UrlBuilder applies it; it never talks
to the network.
"""

from core.mapping.config import (
    AppendField,
    AppendMode,
    Directive,
    MappingConfig,
    OperationKind,
    TranslationMap,
    load_mapping,
)
from core.mapping.url_builder import (
    DEFAULT_HEADERS,
    DEFAULT_METHODS,
    RequestDescriptor,
    UrlBuilder,
    join_path,
    insert_field,
    serialize_body,
)

__all__ = [
    "AppendField",
    "AppendMode",
    "Directive",
    "MappingConfig",
    "OperationKind",
    "TranslationMap",
    "load_mapping",
    "DEFAULT_HEADERS",
    "DEFAULT_METHODS",
    "RequestDescriptor",
    "UrlBuilder",
    "join_path",
    "insert_field",
    "serialize_body",
]
