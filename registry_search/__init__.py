"""
Search/query engine for a package-registry server.

This package is responsible for:
* Parsing structured search queries into record predicates.
* Filtering version records and resolving each package's latest version.
* Answering search, autocomplete, version listing and dependents lookups.
* Serving those lookups over a small FastAPI surface.
"""
