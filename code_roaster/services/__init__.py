from __future__ import annotations

from code_roaster.services.review_service import ReviewService

__all__ = ["ReviewService"]
