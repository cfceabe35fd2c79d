from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from transformkit.config_io import RECIPE_ENV_VAR, load_recipe_mapping
from transformkit.errors import TransformationDefinitionError
from transformkit.recipes import build_template, default_registry
from transformkit.template import TransformationTemplate
from transformkit.utility_registry import UtilityRegistry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transformkit", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    describe = sub.add_parser("describe", help="Print the ordered utilities of a recipe")
    describe.add_argument(
        "recipe",
        nargs="?",
        default=None,
        help=f"Recipe YAML file (default: ${RECIPE_ENV_VAR})",
    )
    describe.add_argument("--registry", default=None, help="Utility kinds as module:attribute")
    describe.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    describe.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    list_kinds = sub.add_parser("list-kinds", help="List utility kinds available to recipes")
    list_kinds.add_argument("--registry", default=None, help="Utility kinds as module:attribute")

    return parser


def _attach_console_handler(*, verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))

    logging.getLogger("transformkit").addHandler(handler)
    return handler


def load_registry(spec: str | None) -> UtilityRegistry:
    """Import `module:attribute`, a registry or a zero-argument callable returning one."""

    if not spec:
        return default_registry()

    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name.strip() or not attr.strip():
        raise ValueError(f"--registry must look like module:attribute (got {spec!r})")

    module = importlib.import_module(module_name.strip())
    target = getattr(module, attr.strip(), None)
    if target is None:
        raise ValueError(f"--registry {spec}: module has no attribute {attr.strip()!r}")
    if callable(target) and not isinstance(target, UtilityRegistry):
        target = target()
    if not isinstance(target, UtilityRegistry):
        raise TypeError(
            f"--registry {spec} must resolve to a UtilityRegistry (type={type(target).__name__})"
        )
    return target


def _target_label(utility: Any) -> str:
    attribute = utility.absolute_file_from_context_attribute
    if attribute is not None:
        extra = getattr(utility, "additional_relative_path", None)
        return f"attribute:{attribute}/{extra}" if extra else f"attribute:{attribute}"
    relative = utility.relative_path
    return f"relative:{relative or '.'}"


def describe_template(template: TransformationTemplate) -> dict[str, Any]:
    rows: list[dict[str, Any]] = []
    for utility in template.utilities():
        rows.append(
            {
                "order": utility.order,
                "name": utility.name,
                "type": type(utility).__name__,
                "target": _target_label(utility),
                "description": utility.get_description(),
                "depends_on": list(getattr(utility, "dependencies", ())),
            }
        )
    return {
        "template": template.name,
        "description": template.get_description(),
        "utilities": rows,
    }


def _print_description(payload: dict[str, Any]) -> None:
    print(f"Template: {payload['template']}")
    if payload["description"]:
        print(f"Description: {payload['description']}")
    for row in payload["utilities"]:
        print(f"{row['order']:>3}. {row['name']} [{row['target']}] {row['description']}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    verbose = bool(getattr(args, "verbose", False))
    package_logger = logging.getLogger("transformkit")
    previous_level = package_logger.level
    if verbose:
        package_logger.setLevel(logging.DEBUG)
    handler = _attach_console_handler(verbose=verbose)
    try:
        registry = load_registry(args.registry)

        if args.command == "list-kinds":
            for row in registry.describe():
                print(f"{row['kind']}: {row['doc'] or ''}".rstrip())
            return 0

        if args.command == "describe":
            mapping, meta = load_recipe_mapping(args.recipe)
            logger.debug("Recipe files: %s", ", ".join(meta["paths"]))
            payload = describe_template(build_template(mapping, registry=registry))
            if args.json:
                print(json.dumps(payload, indent=2, ensure_ascii=False))
            else:
                _print_description(payload)
            return 0
    except (TransformationDefinitionError, ValueError, TypeError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
