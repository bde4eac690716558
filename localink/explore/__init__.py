"""
Explore listing pipeline.

Responsibilities:
- Merge local and remote business sets without duplicating ids.
- Apply category, text search and radius filters.
- Order results by the selected sort key (distance first when located).
- Sequence late-arriving remote batches so stale ones are discarded.
"""
