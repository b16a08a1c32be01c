"""
Runtime wiring.

``build_runtime`` assembles the store, the tenant context, the option field
policy, the registry with the builtin abilities and the executor from one
``Settings`` object. The HTTP server and the tests both start from here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session

from multisite_abilities.abilities.base import AbilityContext
from multisite_abilities.abilities.builtin import register_builtin_abilities
from multisite_abilities.abilities.context import TenantContextManager
from multisite_abilities.abilities.executor import AbilityExecutor
from multisite_abilities.abilities.policy import FieldPolicy, OptionPolicyConfig
from multisite_abilities.abilities.registry import AbilityRegistry
from multisite_abilities.core.config import Settings
from multisite_abilities.core.config import settings as default_settings
from multisite_abilities.store.sql import SqlContentStore, SqlSiteDirectory
from multisite_abilities.store.utils import create_all, create_engine, create_sessionmaker

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Everything a caller needs to run abilities against one database."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    directory: SqlSiteDirectory
    content: SqlContentStore
    tenants: TenantContextManager
    registry: AbilityRegistry
    executor: AbilityExecutor

    def create_all(self) -> None:
        """Create the tables and the main site row. For development and tests."""
        create_all(self.engine)
        self.directory.ensure_main_site(self.settings.main_site_id)


def build_runtime(settings: Optional[Settings] = None, *, engine: Optional[Engine] = None) -> Runtime:
    """
    Build a fully wired runtime.

    Args:
        settings: Settings to build from, defaults to the process settings.
        engine: Reuse an existing engine instead of creating one from the database URL.

    Returns:
        The assembled ``Runtime``. Tables are not created; call ``Runtime.create_all``.
    """
    settings = settings or default_settings
    network = settings.network
    if engine is None:
        database = settings.database
        engine = create_engine(database.url, echo=database.echo)
    session_factory = create_sessionmaker(engine)

    directory = SqlSiteDirectory(session_factory, network)
    tenants = TenantContextManager(directory, network.main_site_id)
    content = SqlContentStore(session_factory, network, lambda: tenants.current_tenant_id)
    policy = FieldPolicy(
        OptionPolicyConfig(loose_unchanged_comparison=settings.loose_option_comparison),
        content,
    )

    registry = AbilityRegistry()
    with registry.registration_window():
        register_builtin_abilities(registry)

    context = AbilityContext(
        directory=directory,
        content=content,
        tenants=tenants,
        options=policy,
        settings=settings,
    )
    logger.info(f"Runtime built for network {network.domain}{network.path} with {len(registry)} abilities")
    return Runtime(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        directory=directory,
        content=content,
        tenants=tenants,
        registry=registry,
        executor=AbilityExecutor(registry, context),
    )
