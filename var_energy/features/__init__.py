"""Price series transformations.

This module provides:
- Unit normalization to ct/kWh
- Alignment of two series by timestamp or by position
- Derived series (retail overhead simulation, deltas, overlays)
"""
