"""
Service layer.

The services sit between the HTTP handlers and the storage backends.
``DirectoryService`` is the only one the handlers talk to; it owns the
slug index, the county enricher and the refresh controller.
"""
