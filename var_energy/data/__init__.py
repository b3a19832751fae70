"""Data acquisition module.

This module handles:
- Price source APIs (ENTSO-E day-ahead, Octopus Agile)
- Payload parsing into price series
- The error taxonomy shared by all sources
"""
