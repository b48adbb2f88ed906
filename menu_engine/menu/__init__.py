"""
Menu derivation engine.

Responsibilities:
- Organize a snapshot into category buckets plus an uncategorized bucket.
- Narrow the organized view with composable filter stages.
- Sort product lists deterministically by name, price, popularity or category priority.
- Score free-text search relevance for products and categories.
- Compose the above into menu, search, featured and by-category queries.

Every function here is pure: inputs are never mutated and results are freshly built.
"""
