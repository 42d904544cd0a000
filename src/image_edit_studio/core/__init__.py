"""
Core module - Image versions, session state and actions.

This module provides the fundamental building blocks for Image Edit Studio:
- Data Types: Immutable image payloads
- Versioning: Actions, reducers and the comparison view
- Session: Per-user owner of the studio state
"""

from image_edit_studio.core.data_types import (
    ImageMetadata,
    ImagePayload,
    InvalidImageError,
)

from image_edit_studio.core.versioning import (
    Action,
    ComparisonView,
    ImageHistory,
    Prompts,
    StudioState,
    UIState,
    get_comparison_images,
    reduce,
)

from image_edit_studio.core.session import (
    Session,
    SessionClosedError,
)


__all__ = [
    # data_types.py
    "ImageMetadata",
    "ImagePayload",
    "InvalidImageError",
    # versioning.py
    "Action",
    "ComparisonView",
    "ImageHistory",
    "Prompts",
    "StudioState",
    "UIState",
    "get_comparison_images",
    "reduce",
    # session.py
    "Session",
    "SessionClosedError",
]
