"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules:

* ``core``: configuration, logging, errors and the slug rules.
* ``storage``: the interchangeable storage backends.
* ``services``: slug index, county lookup, refresh controller and the
  ``DirectoryService`` that wires them together.
* ``api``: versioned HTTP routes under ``api/<version>/``.
"""

from .main import app  # noqa: F401
