"""Build transformation templates from declarative YAML recipes.

A recipe names its extension and template type and lists steps in execution
order. Each step has a `kind` resolved through a `UtilityRegistry`; the
`multiple` kind is handled here because it wraps another step definition.
Kind-specific options sit next to the common keys, and any key nothing reads
is reported as an error.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from transformkit.config_io import RECIPE_ENV_VAR, load_recipe_mapping
from transformkit.config_namespace import ConfigNamespace
from transformkit.template import TransformationTemplate
from transformkit.utilities.log import LOG_LEVELS, Log
from transformkit.utilities.multiple import MultipleOperations
from transformkit.utility import TransformationUtility
from transformkit.utility_registry import UtilityRef, UtilityRegistry

logger = logging.getLogger(__name__)

MULTIPLE_KIND = "multiple"


class DeclarativeTemplate(TransformationTemplate):
    """Template whose identity comes from a recipe instead of a subclass."""

    def __init__(self, *, extension: str, template: str, description: str | None = None):
        if not isinstance(extension, str) or not extension.strip():
            raise ValueError("Recipe extension must be a non-empty string")
        if not isinstance(template, str) or not template.strip():
            raise ValueError("Recipe template must be a non-empty string")
        self._extension = extension.strip()
        self._template_type_name = template.strip()
        self._description = description
        super().__init__()

    def get_extension_class(self) -> str:
        return self._extension

    def get_description(self) -> str:
        return self._description or ""

    def template_type_name(self) -> str:
        return self._template_type_name


def _build_log(cfg: ConfigNamespace) -> Log:
    message = cfg.get_str("message")
    level = cfg.get_str("level", default="info", choices=LOG_LEVELS.keys())
    attributes = cfg.get_list_str("attributes", default=(), allow_empty=True)
    return Log(message, *attributes, level=level)


@lru_cache(maxsize=1)
def default_registry() -> UtilityRegistry:
    return UtilityRegistry.from_refs(
        [
            UtilityRef(
                id="log",
                factory=_build_log,
                doc="Write a message (optionally with context attribute values) to the transformation log.",
                tags=("builtin",),
            ),
        ]
    )


def _apply_common_keys(cfg: ConfigNamespace, utility: TransformationUtility) -> None:
    relative = cfg.get_str("relative", default=None, allow_empty=True)
    if relative is not None:
        utility.relative(relative)

    absolute = cfg.get_str("absolute", default=None)
    absolute_path = cfg.get_str("absolute_path", default=None)
    if absolute is not None:
        utility.absolute(absolute, absolute_path)
    elif absolute_path is not None:
        raise ValueError(f"{cfg.path}.absolute_path requires {cfg.path}.absolute")

    depends_on = cfg.get_list_str("depends_on", default=(), allow_empty=True)
    if depends_on:
        utility.depends_on(*depends_on)

    execute_if = cfg.get_str("execute_if", default=None)
    if execute_if is not None:
        utility.execute_if(execute_if)

    result_attribute = cfg.get_str("result_attribute", default=None)
    if result_attribute is not None:
        utility.set_context_attribute_name(result_attribute)

    utility.set_save_result(cfg.get_bool("save_result", default=utility.save_result))


def _build_step(cfg: ConfigNamespace, registry: UtilityRegistry) -> TransformationUtility:
    kind = cfg.get_str("kind")
    if kind == MULTIPLE_KIND:
        operation_cfg = cfg.namespace("operation")
        operation_kind = operation_cfg.get_str("kind")
        if operation_kind == MULTIPLE_KIND:
            raise ValueError(f"{operation_cfg.path}.kind cannot be {MULTIPLE_KIND}")
        operation = registry.build_operation(operation_kind, operation_cfg)
        operation_name = operation_cfg.get_str("name", default=None)
        if operation_name is not None:
            operation.set_name(operation_name)
        _apply_common_keys(operation_cfg, operation)
        utility: TransformationUtility = MultipleOperations(operation).set_files(
            *cfg.get_list_str("files")
        )
    else:
        utility = registry.resolve(kind).build(cfg)

    _apply_common_keys(cfg, utility)
    return utility


def build_template(
    recipe: Mapping[str, Any], *, registry: UtilityRegistry | None = None
) -> DeclarativeTemplate:
    """Build a template from a recipe mapping, registering steps in file order."""

    if not isinstance(recipe, Mapping):
        raise TypeError(f"Recipe must be a mapping (type={type(recipe).__name__})")
    registry = registry or default_registry()

    root = ConfigNamespace(recipe, path="")
    template = DeclarativeTemplate(
        extension=root.get_str("extension"),
        template=root.get_str("template"),
        description=root.get_str("description", default=None),
    )
    steps = root.sections("steps")
    root.assert_consumed()

    for step_cfg in steps:
        name = step_cfg.get_str("name", default=None)
        utility = _build_step(step_cfg, registry)
        step_cfg.assert_consumed()
        template.add(utility, name)

    logger.info("Built template %s from recipe (%d utilities)", template.name, len(steps))
    return template


def load_recipe(
    path: str | os.PathLike[str] | None = None,
    *,
    registry: UtilityRegistry | None = None,
    env_var: str | None = RECIPE_ENV_VAR,
) -> DeclarativeTemplate:
    mapping, meta = load_recipe_mapping(path, env_var=env_var)
    logger.debug("Building template from %s", ", ".join(meta["paths"]))
    return build_template(mapping, registry=registry)
