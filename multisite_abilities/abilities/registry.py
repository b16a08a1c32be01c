"""Ability registry and category index.

The registry maps an ability name to its implementation and a category slug
to its ``AbilityCategory``. It is an explicit object built once at startup
and handed to the ``AbilityExecutor``; nothing registers into a global table.

Registration only happens inside ``registration_window()``::

    registry = AbilityRegistry()
    with registry.registration_window():
        registry.register_category(category)
        registry.register(ListSitesAbility())

Notes:
    - ``register`` overwrites any existing mapping for the same name.
    - Registering outside the window, or under an unknown category, is a
      caller bug: it is logged and ignored.
    - ``get`` raises ``UnknownAbility`` if the ability is missing.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .base import BaseAbility
from .errors import UnknownAbility
from .schemas.domain import AbilityCategory

logger = logging.getLogger(__name__)


class AbilityRegistry:
    """In-memory mapping of ability names to implementations."""

    def __init__(self) -> None:
        self._abilities: Dict[str, BaseAbility] = {}
        self._categories: Dict[str, AbilityCategory] = {}
        self._window_open = False

    @contextmanager
    def registration_window(self) -> Iterator["AbilityRegistry"]:
        """Open the lifecycle phase in which registration is accepted."""
        self._window_open = True
        try:
            yield self
        finally:
            self._window_open = False
            logger.info(
                f"Registration window closed: {len(self._abilities)} abilities in {len(self._categories)} categories"
            )

    @property
    def is_open(self) -> bool:
        return self._window_open

    def register_category(self, category: AbilityCategory) -> None:
        if not self._window_open:
            logger.error(f"Category '{category.slug}' registered outside the registration window; ignored")
            return
        self._categories[category.slug] = category

    def register(self, ability: BaseAbility) -> None:
        """
        Register an ability implementation.

        Args:
            ability: The ability instance. Its ``category`` must already be registered.
        """
        if not self._window_open:
            logger.error(f"Ability '{ability.name}' registered outside the registration window; ignored")
            return
        if ability.category not in self._categories:
            logger.error(f"Ability '{ability.name}' references unknown category '{ability.category}'; ignored")
            return
        if ability.name in self._abilities:
            logger.debug(f"Ability '{ability.name}' re-registered; replacing previous implementation")
        self._abilities[ability.name] = ability

    def get(self, name: str) -> BaseAbility:
        """
        Retrieve a registered ability by name.

        Raises:
            UnknownAbility: If no ability is registered under ``name``.
        """
        try:
            return self._abilities[name]
        except KeyError:
            raise UnknownAbility(name) from None

    def has(self, name: str) -> bool:
        return name in self._abilities

    def list(self, category: Optional[str] = None) -> List[BaseAbility]:
        """Registered abilities in registration order, optionally for one category."""
        return [ability for ability in self._abilities.values() if category is None or ability.category == category]

    def categories(self) -> List[AbilityCategory]:
        return list(self._categories.values())

    def get_category(self, slug: str) -> Optional[AbilityCategory]:
        return self._categories.get(slug)

    def grouped(self) -> Dict[str, List[BaseAbility]]:
        """Abilities listed under each registered category, empty categories included."""
        groups: Dict[str, List[BaseAbility]] = {slug: [] for slug in self._categories}
        for ability in self._abilities.values():
            groups.setdefault(ability.category, []).append(ability)
        return groups

    def __len__(self) -> int:
        return len(self._abilities)
