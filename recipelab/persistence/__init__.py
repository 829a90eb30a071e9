"""
Per-user persistence backends.

This package contains:
- base: BasePersistence contract
- memory: InMemoryPersistence (default, and the REST service's store)
- http_store: HttpPersistence client for the REST service in api/
"""
