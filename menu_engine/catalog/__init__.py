"""
Catalog snapshot layer.

Responsibilities:
- Define the typed records of a catalog snapshot (products, categories, tags, binds).
- Normalize a raw catalog export into those records.
- Scope a snapshot to one outlet and fulfillment channel.
- Hold the current snapshot in memory and cache derived responses per snapshot version.
"""
