"""
Menu query, filtering and ranking engine over catalog snapshots.
"""
