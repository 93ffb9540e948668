#!/usr/bin/env python3
"""
Data source providers for the relationship discovery engine.

The engine only depends on the two protocols defined here. A provider decides
what a "table" is; the bundled implementations cover in-memory mappings,
directories of JSON/NDJSON data files and directories of XML configuration
files.

Directory providers list their files eagerly (so a missing or unreadable
directory fails in ``list_sources``) but parse each file lazily, when the
engine asks a source for its ``fields()``. A broken file therefore surfaces
as a per-source read failure rather than as a provider failure.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

from .constants import SUPPORTED_JSON_EXTENSIONS, SUPPORTED_XML_EXTENSIONS
from .exceptions import ProviderUnavailable
from .io_utils import iter_records
from .logging_config import get_logger

logger = get_logger(__name__)

RawValues = Sequence[Optional[str]]
FieldMap = Mapping[str, RawValues]


@runtime_checkable
class DataSource(Protocol):
    """
    Protocol for one named origin of rows (a table or a file).

    Examples:
        >>> source = InMemoryDataSource("item", {"name": ["Sword", "Shield"]})
        >>> source.name()
        'item'
    """

    def name(self) -> str:
        """Identifier of the source, unique within one provider."""
        ...

    def fields(self) -> FieldMap:
        """
        Field name -> raw values, in field order.

        Values may repeat and may be blank or None.

        Raises:
            Exception: Any error reading the source; the engine records it
                and skips the source.
        """
        ...


@runtime_checkable
class DataSourceProvider(Protocol):
    """Protocol for an enumerable collection of data sources."""

    def list_sources(self) -> Iterable[DataSource]:
        """
        Enumerate the available sources, in any order.

        Raises:
            Exception: When the collection itself cannot be opened; the engine
                reports this as ProviderUnavailable.
        """
        ...


# ──────────────────────────────────────────────────────────────────────────────
# In-memory
# ──────────────────────────────────────────────────────────────────────────────


class InMemoryDataSource:
    """A data source backed by a plain mapping."""

    def __init__(self, name: str, fields: FieldMap):
        self._name = name
        self._fields = {str(k): list(v) for k, v in fields.items()}

    def name(self) -> str:
        return self._name

    def fields(self) -> FieldMap:
        return self._fields

    def __repr__(self) -> str:
        return f"InMemoryDataSource({self._name!r}, fields={list(self._fields)})"


class InMemoryProvider:
    """
    Provider over in-memory tables.

    Accepts either a mapping ``{source_name: {field_name: values}}`` or an
    iterable of ready-made DataSource objects.
    """

    def __init__(self, tables: Union[Mapping[str, FieldMap], Iterable[DataSource]]):
        if isinstance(tables, Mapping):
            self._sources: List[DataSource] = [
                InMemoryDataSource(name, fields) for name, fields in tables.items()
            ]
        else:
            self._sources = list(tables)

    def list_sources(self) -> List[DataSource]:
        return list(self._sources)


# ──────────────────────────────────────────────────────────────────────────────
# File-backed providers
# ──────────────────────────────────────────────────────────────────────────────


def _list_files(
    base_dir: Path, extensions: Sequence[str], recursive: bool
) -> List[Path]:
    if not base_dir.exists():
        raise ProviderUnavailable(
            f"Directory does not exist: {base_dir}", provider=str(base_dir)
        )
    if not base_dir.is_dir():
        raise ProviderUnavailable(
            f"Not a directory: {base_dir}", provider=str(base_dir)
        )
    candidates = base_dir.rglob("*") if recursive else base_dir.glob("*")
    try:
        files = [
            p for p in candidates
            if p.is_file() and p.name.lower().endswith(tuple(extensions))
        ]
    except OSError as e:
        raise ProviderUnavailable(
            f"Cannot list directory: {base_dir}", provider=str(base_dir), cause=e
        ) from e
    return sorted(files)


def _source_name(base_dir: Path, path: Path) -> str:
    try:
        relative = path.relative_to(base_dir)
    except ValueError:
        relative = Path(path.name)
    return relative.as_posix()


class _FileSource:
    """Lazily parsed file-backed source."""

    def __init__(self, path: Path, source_name: str):
        self.path = path
        self._name = source_name

    def name(self) -> str:
        return self._name

    def fields(self) -> FieldMap:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


def _stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _collect_json_values(value: Any, path: Optional[str], out: Dict[str, List[Optional[str]]]) -> None:
    """Collect scalar values under their key path; arrays do not add a path segment."""
    if isinstance(value, dict):
        for child_key, child in value.items():
            child_path = str(child_key) if path is None else f"{path}/{child_key}"
            _collect_json_values(child, child_path, out)
    elif isinstance(value, list):
        for item in value:
            _collect_json_values(item, path, out)
    elif path is not None:
        out.setdefault(path, []).append(_stringify(value))


class JsonFileSource(_FileSource):
    """
    One JSON / NDJSON data file.

    Every scalar becomes a value of the field named by its key path inside the
    record, e.g. ``name`` or ``quest/rewards/item_name``.
    """

    def fields(self) -> FieldMap:
        out: Dict[str, List[Optional[str]]] = {}
        for record in iter_records(self.path):
            if isinstance(record, (dict, list)):
                _collect_json_values(record, None, out)
        return out


class JsonDirectoryProvider:
    """Provider with one source per JSON/NDJSON file under a directory."""

    def __init__(self, base_dir: Union[str, Path], recursive: bool = True):
        self.base_dir = Path(base_dir)
        self.recursive = recursive

    def list_sources(self) -> List[DataSource]:
        files = _list_files(self.base_dir, SUPPORTED_JSON_EXTENSIONS, self.recursive)
        logger.debug("Found %d JSON files under %s", len(files), self.base_dir)
        return [JsonFileSource(p, _source_name(self.base_dir, p)) for p in files]


def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _collect_xml_values(element: ET.Element, path: str, out: Dict[str, List[Optional[str]]]) -> None:
    for attr_name, attr_value in element.attrib.items():
        out.setdefault(f"{path}/@{_local_name(attr_name)}", []).append(attr_value)
    children = [child for child in element if isinstance(child.tag, str)]
    if not children:
        out.setdefault(path, []).append(element.text)
        return
    for child in children:
        _collect_xml_values(child, f"{path}/{_local_name(child.tag)}", out)


class XmlFileSource(_FileSource):
    """
    One XML configuration file.

    Fields are keyed by element path from the root: attributes as
    ``items/item/@name`` and leaf element text as ``drops/drop/item_name``.
    Elements at the same path share a field, different paths never do.
    """

    def fields(self) -> FieldMap:
        root = ET.parse(self.path).getroot()
        out: Dict[str, List[Optional[str]]] = {}
        _collect_xml_values(root, _local_name(root.tag), out)
        return out


class XmlDirectoryProvider:
    """Provider with one source per XML file under a directory."""

    def __init__(self, base_dir: Union[str, Path], recursive: bool = True):
        self.base_dir = Path(base_dir)
        self.recursive = recursive

    def list_sources(self) -> List[DataSource]:
        files = _list_files(self.base_dir, SUPPORTED_XML_EXTENSIONS, self.recursive)
        logger.debug("Found %d XML files under %s", len(files), self.base_dir)
        return [XmlFileSource(p, _source_name(self.base_dir, p)) for p in files]


PROVIDER_TYPES = {
    "xml": XmlDirectoryProvider,
    "json": JsonDirectoryProvider,
}


def provider_for_directory(base_dir: Union[str, Path], kind: str = "xml") -> DataSourceProvider:
    """Build a directory provider by format name (``xml`` or ``json``)."""
    try:
        provider_cls = PROVIDER_TYPES[kind.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown source format {kind!r}; expected one of {sorted(PROVIDER_TYPES)}"
        ) from None
    return provider_cls(base_dir)


__all__ = [
    "DataSource",
    "DataSourceProvider",
    "InMemoryDataSource",
    "InMemoryProvider",
    "JsonFileSource",
    "JsonDirectoryProvider",
    "XmlFileSource",
    "XmlDirectoryProvider",
    "provider_for_directory",
]
