"""
Server modules for Fantasy Map Builder.

This package contains the FastAPI router modules for worlds, maps,
locations, stamps, travel settings and calculations, export/import and
session authentication.
"""
