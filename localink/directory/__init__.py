"""
Directory data layer.

Responsibilities:
- Canonical business / review / bookmark / deal records.
- An injectable record store with secondary indexes.
- Seed loading and repository helpers used by the API.
"""
