"""
Utility functions module.

Time Semantics:
- Cache timestamps are epoch milliseconds
- Components accept an injectable clock so TTL boundaries can be tested
"""
