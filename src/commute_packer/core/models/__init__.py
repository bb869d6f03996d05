"""
Core Models Package

Immutable, validated data models that serve as the single source of truth.

All models in this package are frozen dataclasses. This ensures:
1. No accidental mutation while a pack is being assembled
2. Safe to pass between threads serving concurrent requests
3. Can be used as dict keys or in sets

| Model | Role |
|-------|------|
| `Candidate` | Video descriptor eligible for a pack |
| `FillWindow` | Acceptance window [min, max] in seconds |
| `PackResult` | Selected items plus calculated fill metrics |
| `TopUpResult` | Items chosen to fill the remaining commute time |
"""

from .candidates import Candidate, Level, normalize_topic
from .packs import FillWindow, PackResult, TopUpResult

__all__ = [
    "Candidate",
    "Level",
    "normalize_topic",
    "FillWindow",
    "PackResult",
    "TopUpResult",
]
