"""
Commute Packer Core Package

Shared data models and utilities used by the pack builder, the candidate
sources and the controller.

**MODEL RULES:**

1. **Immutable Data Models**
   - Frozen dataclasses, new instances created for any change
   - Safe to share between concurrent requests

2. **Calculated Totals (Never Stored)**
   - `total_duration_sec` and `under_filled` are always derived from items

3. **Normalized Topics**
   - Topic tags are stored lowercase so matching is a plain set lookup
"""

from .models import Candidate, Level, FillWindow, PackResult, TopUpResult

__all__ = [
    "Candidate",
    "Level",
    "FillWindow",
    "PackResult",
    "TopUpResult",
]
