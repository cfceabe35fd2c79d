from __future__ import annotations

from typing import Any

from transformkit.template import TransformationTemplate


class Extension:
    """Groups the transformation templates a project ships.

    The extension class is the group identifier templates use in their names
    (see `TransformationTemplate.get_extension_class`).
    """

    def __init__(self) -> None:
        self._templates: list[type[TransformationTemplate]] = []

    def get_description(self) -> str:
        raise NotImplementedError

    def get_version(self) -> str:
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__

    def add(self, template_class: Any) -> "Extension":
        if not isinstance(template_class, type) or not issubclass(
            template_class, TransformationTemplate
        ):
            raise TypeError(
                "Extension templates must be TransformationTemplate subclasses "
                f"(got {template_class!r})"
            )
        if template_class in self._templates:
            raise ValueError(
                f"Duplicate transformation template in extension {self.name}: "
                f"{template_class.__name__}"
            )
        self._templates.append(template_class)
        return self

    def templates(self) -> tuple[type[TransformationTemplate], ...]:
        return tuple(self._templates)

    def __str__(self) -> str:
        return self.name
