"""Mapping configuration for REST operations.

A mapping tells the client, per operation kind, how each type name is
translated into an HTTP request. Example raw configuration:

    {
        "insert": {"media/audio": {"method": "PUT"}},
        "get": {
            "media/text/words": {"insert": "text", "query": ["lang"]},
            "media/image": {"append": null}
        },
        "assoc": {"audio/addAuthor": {"insert": "audio", "data": "authors"}}
    }

Missing operation kinds normalize to empty mappings. Directive fields are
kept verbatim here; per-kind defaults (method, append field) are resolved
by the UrlBuilder.
"""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, ConfigDict
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated


class OperationKind(str, Enum):
    """Abstract operations that can be mapped to REST requests."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    GET = "get"
    LIST = "list"
    ASSOC = "assoc"


class AppendMode(str, Enum):
    DEFAULT = "DEFAULT"         # Use the operation's identity field
    EXPLICIT = "EXPLICIT"       # Use the configured field
    SUPPRESSED = "SUPPRESSED"   # Append nothing


@dataclass(frozen=True)
class AppendField:
    """Which entity field, if any, is appended as the last path segment."""
    mode: AppendMode = AppendMode.DEFAULT
    field: Optional[str] = None

    @classmethod
    def default(cls) -> "AppendField":
        return cls(AppendMode.DEFAULT)

    @classmethod
    def explicit(cls, field: str) -> "AppendField":
        return cls(AppendMode.EXPLICIT, field)

    @classmethod
    def suppressed(cls) -> "AppendField":
        return cls(AppendMode.SUPPRESSED)

    def resolve(self, default_field: str = "id") -> Optional[str]:
        """Return the field to append, or None when appending is suppressed."""
        if self.mode == AppendMode.SUPPRESSED:
            return None
        if self.mode == AppendMode.EXPLICIT:
            return self.field
        return default_field


def _parse_append(value):
    """Parse the raw ``append`` entry; only reached when the key is present."""
    if isinstance(value, AppendField):
        return value
    if value is None:
        return AppendField.suppressed()
    if isinstance(value, str):
        return AppendField.explicit(value)
    raise ValueError(f"append must be a field name or null, got {value!r}")


def _parse_query(value):
    """Accept any ordered sequence of field names; None means no query."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


AppendValue = Annotated[AppendField, BeforeValidator(_parse_append)]
QueryValue = Annotated[Tuple[str, ...], BeforeValidator(_parse_query)]


class Directive(BaseModel):
    """Per-type-name instructions for building a request."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    method: Optional[str] = Field(default=None, description="HTTP verb override")
    append: AppendValue = Field(default_factory=AppendField.default)
    insert: Optional[str] = Field(default=None, description="Field spliced after its own name in the path")
    rewrite_url: Optional[str] = Field(default=None, alias="rewriteUrl")
    query: QueryValue = Field(default=(), description="Entity fields lifted into the query string")
    data: Optional[str] = Field(default=None, description="Entity field sent as the assoc body")


def _parse_directives(value):
    if value is None:
        return {}
    if isinstance(value, Mapping):
        # a null entry means the type name is not mapped
        return {name: directive for name, directive in value.items() if directive is not None}
    return value


DirectiveMap = Annotated[Dict[str, Directive], BeforeValidator(_parse_directives)]


class MappingConfig(BaseModel):
    """Normalized mapping: one ``type name -> Directive`` table per operation kind."""
    model_config = ConfigDict(frozen=True)

    insert: DirectiveMap = Field(default_factory=dict)
    update: DirectiveMap = Field(default_factory=dict)
    delete: DirectiveMap = Field(default_factory=dict)
    get: DirectiveMap = Field(default_factory=dict)
    list: DirectiveMap = Field(default_factory=dict)
    assoc: DirectiveMap = Field(default_factory=dict)

    @classmethod
    def normalize(cls, raw: Union["MappingConfig", Mapping[str, Any], None] = None) -> "MappingConfig":
        """Build a MappingConfig from a raw, possibly partial, configuration.

        Args:
            raw: None, a dict keyed by operation kind, or a MappingConfig

        Returns:
            MappingConfig with all six operation kinds present
        """
        if isinstance(raw, MappingConfig):
            return raw
        return cls.model_validate(dict(raw or {}))

    def directives(self, kind: Union[OperationKind, str]) -> Mapping[str, Directive]:
        """Read-only view of the directives for an operation kind."""
        return MappingProxyType(getattr(self, OperationKind(kind).value))

    def directive_for(self, kind: Union[OperationKind, str], type_name: str) -> Optional[Directive]:
        """Return the directive for a type name, or None if it is not mapped."""
        return self.directives(kind).get(type_name)

    def type_names(self, kind: Union[OperationKind, str]) -> List[str]:
        return sorted(self.directives(kind))

    def get_stats(self) -> Dict[str, int]:
        """Count of mapped type names per operation kind."""
        return {kind.value: len(self.directives(kind)) for kind in OperationKind}


def load_mapping(path: Union[str, Path]) -> MappingConfig:
    """Load and normalize a mapping from a JSON file.

    Expected format is the raw mapping shown in this module's docstring.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return MappingConfig.normalize(data)


class TranslationMap(Mapping[str, str]):
    """Read-only ``placeholder -> value`` table applied to URL templates.

    Values are stored in string form, so ``{"productId": 2}`` substitutes
    ``$productId`` with ``"2"``.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values = {str(k): str(v) for k, v in (values or {}).items()}

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TranslationMap({self._values!r})"

    def apply(self, template: str) -> str:
        """Replace every ``$key`` occurrence with its value.

        Longer keys are applied first so ``$productId`` is not clobbered by
        a shorter ``$product`` key.
        """
        for key in sorted(self._values, key=len, reverse=True):
            template = template.replace("$" + key, self._values[key])
        return template
