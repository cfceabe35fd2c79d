from __future__ import annotations

import difflib
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from transformkit.config_namespace import ConfigNamespace
from transformkit.utility import TransformationOperation, TransformationUtility


class UtilityFactory(Protocol):
    def __call__(self, cfg: ConfigNamespace) -> TransformationUtility:
        ...


@dataclass(frozen=True)
class UtilityRef:
    """A utility kind recipes can refer to by id."""

    id: str
    factory: UtilityFactory
    doc: str | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise TypeError("UtilityRef.id must be a non-empty string")
        object.__setattr__(self, "id", self.id.strip())

        if not callable(self.factory):
            raise TypeError(f"UtilityRef.factory must be callable (kind={self.id})")
        if self.doc is not None and (not isinstance(self.doc, str) or not self.doc.strip()):
            raise TypeError("UtilityRef.doc must be a non-empty string or None")

        if self.tags:
            object.__setattr__(
                self, "tags", tuple(str(tag).strip() for tag in self.tags if str(tag).strip())
            )

    def build(self, cfg: ConfigNamespace) -> TransformationUtility:
        utility = self.factory(cfg)
        if not isinstance(utility, TransformationUtility):
            raise TypeError(
                f"Utility factory returned non-utility (kind={self.id}, type={type(utility).__name__})"
            )
        return utility


@dataclass(frozen=True)
class UtilityRegistry:
    _by_id: dict[str, UtilityRef]

    @classmethod
    def from_refs(cls, refs: Iterable[UtilityRef]) -> "UtilityRegistry":
        entries: dict[str, UtilityRef] = {}
        for ref in refs:
            if not isinstance(ref, UtilityRef):
                raise TypeError(f"Expected UtilityRef (type={type(ref).__name__})")
            if ref.id in entries:
                raise ValueError(f"Duplicate utility kind id: {ref.id}")
            entries[ref.id] = ref
        return cls(_by_id=entries)

    def merged(self, refs: Iterable[UtilityRef]) -> "UtilityRegistry":
        """Return a new registry holding these kinds plus `refs`."""

        return UtilityRegistry.from_refs([*self._by_id.values(), *refs])

    def available(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_id.keys()))

    def describe(self) -> tuple[dict[str, Any], ...]:
        rows: list[dict[str, Any]] = []
        for ref in sorted(self._by_id.values(), key=lambda r: r.id):
            rows.append({"kind": ref.id, "doc": ref.doc, "tags": list(ref.tags)})
        return tuple(rows)

    def resolve(self, kind: str) -> UtilityRef:
        """Exact id, else a unique `<namespace>.<kind>` suffix match."""

        if not isinstance(kind, str) or not kind.strip():
            raise ValueError("kind must be a non-empty string")
        key = kind.strip()

        direct = self._by_id.get(key)
        if direct is not None:
            return direct

        if "." not in key:
            matches = sorted(k for k in self._by_id.keys() if k.endswith("." + key))
            if len(matches) == 1:
                return self._by_id[matches[0]]
            if len(matches) > 1:
                raise ValueError(
                    f"Ambiguous utility kind id: {kind} (matches: {', '.join(matches)})"
                )

        available = ", ".join(self.available()) or "<none>"
        suggestions = self.suggest(key)
        hint = f"; did you mean: {', '.join(suggestions)}" if suggestions else ""
        raise ValueError(f"Unknown utility kind id: {kind} (available: {available}{hint})")

    def suggest(self, kind: str, *, limit: int = 3) -> tuple[str, ...]:
        key = (kind or "").strip()
        if not key:
            return ()

        available = self.available()
        if not available:
            return ()

        suffix_to_full: dict[str, list[str]] = defaultdict(list)
        for full in available:
            suffix_to_full[full.split(".", 1)[-1]].append(full)

        suggestions = list(difflib.get_close_matches(key, list(suffix_to_full.keys()), n=limit))
        expanded: list[str] = []
        for suggestion in suggestions:
            expanded.extend(suffix_to_full.get(suggestion, []))
        if expanded:
            return tuple(expanded[:limit])
        return tuple(difflib.get_close_matches(key, list(available), n=limit))

    def build_operation(self, kind: str, cfg: ConfigNamespace) -> TransformationOperation:
        ref = self.resolve(kind)
        utility = ref.build(cfg)
        if not isinstance(utility, TransformationOperation):
            raise TypeError(
                f"{cfg.path or '<root>'} kind={ref.id} does not build a TransformationOperation "
                f"(type={type(utility).__name__})"
            )
        return utility
