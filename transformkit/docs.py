"""`transformkit` invariants and boundaries.

This module exists to make repository-wide refactors and boundary tests explicit.

Registration invariants:

1) A utility belongs to at most one template. `parent` and `order` are assigned
   together, once, by `TransformationTemplate.add`.
2) Orders are 1-based, gap-free and follow the order in which registrations
   were serialized by the template lock. A utility is claimed before it is
   appended, so a reader never sees a utility without its order and a refused
   utility never appears in any template.
3) After `add`, every utility has a relative path or a context attribute.
   A utility failing that check stays registered; templates are not rolled back.
4) `TransformationTemplate.utilities()` returns a tuple snapshot; callers cannot
   change the template through it.
5) Step names are not checked for uniqueness within a template.

Layering:

- core: `errors`, `utility`, `utilities`, `template`, `extension`
  (standard library only; no `yaml`, no recipe or CLI imports)
- recipes: `config_io`, `config_namespace`, `utility_registry`, `recipes`
- entry point: `cli`
"""

from __future__ import annotations

CORE_MODULES: tuple[str, ...] = (
    "transformkit.errors",
    "transformkit.utility",
    "transformkit.utilities",
    "transformkit.utilities.log",
    "transformkit.utilities.multiple",
    "transformkit.template",
    "transformkit.extension",
)

RECIPE_MODULES: tuple[str, ...] = (
    "transformkit.config_io",
    "transformkit.config_namespace",
    "transformkit.utility_registry",
    "transformkit.recipes",
    "transformkit.cli",
)
