"""Schemas and format catalogs.

A :class:`Schema` is the immutable grammar of one version of a file format:
its version label/ordinal, the required file extension and the named
:class:`~fileformat_schema.models.definition.FormatNodeDefinition` objects.

A :class:`FormatCatalog` groups every schema of one format under its tag
(e.g. ``"GHDR"``).

Authoring mistakes (duplicate names, dangling references, bad templates)
raise :class:`~fileformat_schema.errors.SchemaError` at construction time,
so a schema that exists is always internally consistent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from fileformat_schema.errors import PatternSyntaxError, SchemaError
from fileformat_schema.matching.pattern import compile_pattern
from fileformat_schema.models.definition import (
    HEAD,
    NAME_RE,
    FormatNodeDefinition,
    Sentinel,
)


def _freeze_definitions(
    version_label: str,
    definitions: Union[Mapping[str, FormatNodeDefinition], Iterable[FormatNodeDefinition]],
) -> Mapping[str, FormatNodeDefinition]:
    if isinstance(definitions, Mapping):
        for key, d in definitions.items():
            if key != d.name:
                raise SchemaError(f"{version_label}: definition keyed {key!r} is named {d.name!r}")
        items = list(definitions.values())
    else:
        items = list(definitions)

    out: Dict[str, FormatNodeDefinition] = {}
    for d in items:
        if not isinstance(d, FormatNodeDefinition):
            raise SchemaError(f"{version_label}: expected FormatNodeDefinition, got {type(d).__name__}")
        if d.name in out:
            raise SchemaError(f"{version_label}: duplicate definition name {d.name!r}")
        out[d.name] = d
    return MappingProxyType(out)


@dataclass(frozen=True)
class Schema:
    """
    Grammar of one format version.

    version_label: human-readable version, e.g. "Version 1.0"
    version_ordinal: integer ordering of versions within a format
    file_extension: required extension including the leading dot (case-insensitive)
    definitions: read-only mapping name -> definition, in declaration order
    """
    version_label: str
    version_ordinal: int
    file_extension: str
    definitions: Mapping[str, FormatNodeDefinition] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "version_ordinal", int(self.version_ordinal))
        object.__setattr__(self, "definitions", _freeze_definitions(self.version_label, self.definitions))
        self._check()

    def _check(self) -> None:
        label = self.version_label
        if not label:
            raise SchemaError("schema version_label must be non-empty")
        ext = self.file_extension
        if not ext.startswith(".") or len(ext) < 2:
            raise SchemaError(f"{label}: file_extension must start with '.', got {ext!r}")

        for d in self.definitions.values():
            if not NAME_RE.match(d.name):
                raise SchemaError(f"{label}: invalid definition name {d.name!r}")
            if d.level < 0:
                raise SchemaError(f"{label}: definition {d.name!r} has negative level {d.level}")
            for which, template in (("title", d.title_pattern), ("data", d.data_pattern)):
                try:
                    compile_pattern(template)
                except PatternSyntaxError as e:
                    raise SchemaError(f"{label}: definition {d.name!r} has a bad {which} template: {e}") from e
            for rel, ref in d.iter_references():
                if isinstance(ref, Sentinel):
                    if ref is HEAD and rel != "prev_siblings":
                        raise SchemaError(f"{label}: definition {d.name!r} uses the header marker in {rel}")
                    continue
                if ref not in self.definitions:
                    raise SchemaError(
                        f"{label}: definition {d.name!r} references unknown node {ref!r} in {rel}"
                    )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> FormatNodeDefinition:
        try:
            return self.definitions[name]
        except KeyError:
            raise KeyError(f"{self.version_label}: no definition named {name!r}") from None

    def head_candidates(self) -> Tuple[str, ...]:
        """Names of the definitions allowed right after the file header."""
        return tuple(d.name for d in self.definitions.values() if d.follows_header)

    def matches_extension(self, extension: str) -> bool:
        return self.file_extension.lower() == extension.lower()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version_label,
            "ordinal": self.version_ordinal,
            "extension": self.file_extension,
            "nodes": [d.to_dict() for d in self.definitions.values()],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Schema:
        try:
            return cls(
                version_label=str(d["version"]),
                version_ordinal=int(d["ordinal"]),
                file_extension=str(d["extension"]),
                definitions=[FormatNodeDefinition.from_dict(n) for n in d.get("nodes", [])],
            )
        except KeyError as e:
            raise SchemaError(f"schema dict is missing {e}") from e


@dataclass(frozen=True)
class FormatCatalog:
    """
    All schema versions of one file format.

    Built once from a fixed declarative definition and read-only afterwards.
    """
    format_tag: str
    schemas: Mapping[str, Schema] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.format_tag:
            raise SchemaError("format_tag must be non-empty")
        if isinstance(self.schemas, Mapping):
            pairs = list(self.schemas.items())
        else:
            pairs = [(s.version_label, s) for s in self.schemas]

        out: Dict[str, Schema] = {}
        ordinals: Dict[int, str] = {}
        for label, s in pairs:
            if label != s.version_label:
                raise SchemaError(f"{self.format_tag}: schema keyed {label!r} is labelled {s.version_label!r}")
            if label in out:
                raise SchemaError(f"{self.format_tag}: duplicate version {label!r}")
            if s.version_ordinal in ordinals:
                raise SchemaError(
                    f"{self.format_tag}: {label!r} and {ordinals[s.version_ordinal]!r} "
                    f"share ordinal {s.version_ordinal}"
                )
            out[label] = s
            ordinals[s.version_ordinal] = label
        object.__setattr__(self, "schemas", MappingProxyType(out))

    def get_schema(self, version_label: str) -> Schema:
        if version_label not in self.schemas:
            known = ", ".join(self.versions()) or "<none>"
            raise KeyError(f"{self.format_tag}: unknown version {version_label!r} (known: {known})")
        return self.schemas[version_label]

    def versions(self) -> List[str]:
        """Version labels ordered by ordinal."""
        return [s.version_label for s in sorted(self.schemas.values(), key=lambda s: s.version_ordinal)]

    def latest(self) -> Schema:
        if not self.schemas:
            raise ValueError(f"{self.format_tag}: catalog has no schemas.")
        return max(self.schemas.values(), key=lambda s: s.version_ordinal)

    def find_by_ordinal(self, ordinal: int) -> Optional[Schema]:
        for s in self.schemas.values():
            if s.version_ordinal == ordinal:
                return s
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format_tag,
            "schemas": [self.schemas[v].to_dict() for v in self.versions()],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> FormatCatalog:
        if "format" not in d:
            raise SchemaError("catalog dict is missing 'format'")
        return cls(
            format_tag=str(d["format"]),
            schemas=[Schema.from_dict(s) for s in d.get("schemas", [])],
        )
