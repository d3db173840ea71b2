"""
Travel computation core for Fantasy Map Builder.

This package contains the pure, synchronous pieces of the application:
unit conversion, pixel distances, travel-time breakdowns, route totals,
duration formatting, travel settings values and the default stamp catalog.
Nothing in here touches the database or the network.
"""
