"""multisite-abilities.

A catalogue of named, schema-validated abilities that let an agent inspect and
mutate a multisite content network. Tenant-scoped abilities run inside a
temporarily switched site context that is restored on every exit path.
"""

__version__ = "0.1.0"
