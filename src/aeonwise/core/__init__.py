"""Core domain logic.

Modules:
- models: profile, lesson and progress records
- sectionizer: lesson text -> typed content sections
- ranking: profile points and rank tiers
- narration: text-to-speech scripts for lessons and sections
- matching: skill extraction and skill-swap matching
- catalog: bundled course data
"""

__all__ = [
    "models",
    "sectionizer",
    "ranking",
    "narration",
    "matching",
    "catalog",
]
