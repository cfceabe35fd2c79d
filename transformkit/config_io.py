from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

RECIPE_ENV_VAR = "TRANSFORMKIT_RECIPE"


def _load_yaml_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except FileNotFoundError:
        raise
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Recipe file must contain a YAML mapping: {path}")
    return dict(payload)


def _deep_merge(base: Any, overlay: Any, *, path: str) -> Any:
    if overlay is None:
        return None

    if base is None:
        return overlay

    if isinstance(base, Mapping):
        if not isinstance(overlay, Mapping):
            raise ValueError(
                f"Invalid recipe overlay merge at {path}: base is mapping but overlay is {type(overlay).__name__}"
            )
        merged: dict[str, Any] = dict(base)
        for key, overlay_value in overlay.items():
            next_path = f"{path}.{key}" if path else str(key)
            if key in base:
                merged[key] = _deep_merge(base[key], overlay_value, path=next_path)
            else:
                merged[key] = overlay_value
        return merged

    if isinstance(base, (list, tuple)):
        if not isinstance(overlay, (list, tuple)):
            raise ValueError(
                f"Invalid recipe overlay merge at {path}: base is list but overlay is {type(overlay).__name__}"
            )
        return list(overlay)

    if isinstance(overlay, (Mapping, list, tuple)):
        raise ValueError(
            f"Invalid recipe overlay merge at {path}: base is {type(base).__name__} but overlay is {type(overlay).__name__}"
        )

    return overlay


def local_overlay_path(recipe_path: str | os.PathLike[str]) -> str:
    """`steps.yaml` -> `steps.local.yaml`, next to the recipe."""

    path = Path(recipe_path)
    return str(path.with_name(f"{path.stem}.local{path.suffix or '.yaml'}"))


def load_recipe_mapping(
    path: str | os.PathLike[str] | None = None,
    *,
    env_var: str | None = RECIPE_ENV_VAR,
    use_local_overlay: bool = True,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load a recipe mapping from YAML.

    The recipe path comes from `path`, else from the `env_var` environment
    variable. A sibling `<stem>.local.yaml` file, when present, is deep-merged
    over the base file (lists are replaced, `null` removes a value).

    Returns `(mapping, meta)` where meta records the files that were read.
    """

    mode = "explicit"
    raw_path = str(path).strip() if path is not None else ""
    if not raw_path and env_var:
        raw_path = os.environ.get(str(env_var), "").strip()
        mode = "env"
    if not raw_path:
        raise ValueError(
            f"No recipe path given and environment variable {env_var or '<unset>'} is empty"
        )

    recipe_path = os.path.abspath(os.path.expandvars(os.path.expanduser(raw_path)))
    if not os.path.exists(recipe_path):
        raise FileNotFoundError(f"Missing recipe file: {recipe_path}")

    mapping = _load_yaml_mapping(recipe_path)
    loaded_paths = [recipe_path]

    overlay_path = local_overlay_path(recipe_path)
    if use_local_overlay and os.path.exists(overlay_path):
        overlay = _load_yaml_mapping(overlay_path)
        mapping = _deep_merge(mapping, overlay, path="")
        loaded_paths.append(overlay_path)
        mode = f"{mode}+local"

    logger.debug("Loaded recipe mapping (mode=%s) from %s", mode, ", ".join(loaded_paths))
    meta = {"mode": mode, "paths": loaded_paths, "env_var": env_var}
    return mapping, meta
