"""
Fantasy Map Builder application.

A FastAPI-powered worldbuilding tool: upload a map image, place stamped
locations with notes and wiki links, and estimate travel times between
points from configurable speeds.
"""
