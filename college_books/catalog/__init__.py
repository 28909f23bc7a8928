"""
Catalog package for the textbook listings API.

This package contains the listing schemas, the filter translation shared
by every storage backend, the sample data used to seed the fallback
store and the route definitions mounted under ``/api/books``.
"""
