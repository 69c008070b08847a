"""
SMK App - Collection loader for the SMK open art API

Incrementally fetches the paginated collection search API, caches the
normalized dataset locally when the user consents, and refreshes
lazily-activated renderers and analyzers through a debounced scheduler.
"""

__version__ = "0.1.0"
__author__ = "SMK Data Visualized Team"
