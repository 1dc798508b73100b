"""
db/ - Database Layer
====================
Owns the PostgreSQL connection pool, the unit-of-work helper and the schema.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
