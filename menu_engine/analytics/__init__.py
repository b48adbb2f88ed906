"""
Menu analytics.

Responsibilities:
- Aggregate counts, price distribution, tag usage and nutrition averages over an organized view.
- Flag structural health problems and map each one to a remediation.
"""
