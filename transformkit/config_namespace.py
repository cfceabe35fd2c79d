"""Recipe sections: typed reads over one mapping of a recipe file.

A section is the recipe root, one step (`steps[2]`) or a step's wrapped
operation (`steps[2].operation`). Every key read is recorded, so a section can
report the keys nothing asked for; that is how typos in recipes surface.
A key written as `null` (or left empty in YAML) reads as absent.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

_REQUIRED = object()


class ConfigNamespace:
    """One mapping of a recipe, addressed by its path inside the recipe."""

    def __init__(self, data: Mapping[str, Any], *, path: str = "") -> None:
        if not isinstance(data, Mapping):
            raise TypeError(
                f"Recipe section {path or '<root>'} must be a mapping (type={type(data).__name__})"
            )
        self.data = data
        self.path = path
        self._read: set[str] = set()
        self._sections: dict[str, ConfigNamespace] = {}

    @classmethod
    def empty(cls, *, path: str) -> "ConfigNamespace":
        return cls({}, path=path)

    def __repr__(self) -> str:
        return f"ConfigNamespace(path={self.path or '<root>'!r}, keys={sorted(map(str, self.data))})"

    def key_path(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def consumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._read))

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(str(key) for key in self.data if key not in self._read))

    def assert_consumed(self) -> None:
        """Fail on keys nothing read, here and in nested sections."""

        unknown = self.unconsumed_keys()
        if unknown:
            known = ", ".join(self.consumed_keys()) or "<none>"
            raise ValueError(
                f"Unknown recipe keys under {self.path or '<root>'}: "
                f"{', '.join(unknown)} (recognised here: {known})"
            )
        for section in self._sections.values():
            section.assert_consumed()

    def _lookup(self, key: str, default: Any) -> Any:
        if key in self._sections:
            raise ValueError(f"{self.key_path(key)} was already read as a section")
        self._read.add(key)
        value = self.data.get(key)
        if value is None:
            if default is _REQUIRED:
                raise ValueError(f"Recipe is missing required key: {self.key_path(key)}")
            return default
        return value

    def _type_error(self, where: str, expected: str, value: Any) -> TypeError:
        return TypeError(f"{where} must be {expected} (type={type(value).__name__})")

    def get_bool(self, key: str, *, default: bool | object = _REQUIRED) -> bool:
        value = self._lookup(key, default)
        if not isinstance(value, bool):
            raise self._type_error(self.key_path(key), "true or false", value)
        return value

    def get_str(
        self,
        key: str,
        *,
        default: str | None | object = _REQUIRED,
        allow_empty: bool = False,
        choices: Iterable[str] | None = None,
    ) -> str | None:
        value = self._lookup(key, default)
        if value is None:
            return None
        where = self.key_path(key)
        if not isinstance(value, str):
            raise self._type_error(where, "a string", value)

        text = value.strip()
        if not text and not (allow_empty and value == ""):
            raise ValueError(f"{where} cannot be empty")
        if choices is not None:
            allowed = sorted(choices)
            if text not in allowed:
                raise ValueError(f"{where} must be one of: {', '.join(allowed)} (got {text!r})")
        return text

    def get_list_str(
        self,
        key: str,
        *,
        default: list[str] | tuple[str, ...] | object = _REQUIRED,
        allow_empty: bool = False,
    ) -> list[str]:
        """Read a list of names; a single name may be written without the list."""

        value = self._lookup(key, default)
        where = self.key_path(key)
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise self._type_error(where, "a list of strings", value)

        names: list[str] = []
        for idx, item in enumerate(value):
            if not isinstance(item, str):
                raise self._type_error(f"{where}[{idx}]", "a string", item)
            if not item.strip():
                raise ValueError(f"{where}[{idx}] cannot be empty")
            names.append(item.strip())

        if not names and not allow_empty:
            raise ValueError(f"{where} cannot be empty")
        return names

    def namespace(
        self,
        key: str,
        *,
        default: Mapping[str, Any] | None | object = _REQUIRED,
    ) -> "ConfigNamespace":
        """Read a nested mapping (a wrapped `operation`) as its own section."""

        if key in self._sections:
            return self._sections[key]

        where = self.key_path(key)
        self._read.add(key)
        raw = self.data.get(key)
        if raw is None:
            if default is _REQUIRED:
                raise ValueError(f"Recipe is missing required section: {where}")
            raw = {} if default is None else default
        if not isinstance(raw, Mapping):
            raise self._type_error(where, "a mapping", raw)

        section = ConfigNamespace(dict(raw), path=where)
        self._sections[key] = section
        return section

    def sections(self, key: str, *, allow_empty: bool = False) -> list["ConfigNamespace"]:
        """Read a list of mappings (the recipe `steps`) as sections `key[0]`, `key[1]`, ...

        The returned sections are checked by the caller, one at a time, with
        `assert_consumed()`; the parent does not recurse into them.
        """

        value = self._lookup(key, _REQUIRED)
        where = self.key_path(key)
        if not isinstance(value, (list, tuple)):
            raise self._type_error(where, "a list of mappings", value)
        if not value and not allow_empty:
            raise ValueError(f"{where} cannot be empty")

        sections: list[ConfigNamespace] = []
        for idx, item in enumerate(value):
            if not isinstance(item, Mapping):
                raise self._type_error(f"{where}[{idx}]", "a mapping", item)
            sections.append(ConfigNamespace(item, path=f"{where}[{idx}]"))
        return sections
