"""Use-case layer for schedule commands, journal access, and live sync.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving MVVM + Hexagonal boundaries.
"""
