"""Public testimonial routes."""

from fastapi import APIRouter, Depends, Query

from ...db.repositories import TestimonialRepository
from ..deps import get_testimonial_repo

router = APIRouter(prefix="/api/testimonials", tags=["testimonials"])

FEATURED_LIMIT = 3


@router.get("")
async def list_testimonials(
    limit: int = Query(50, ge=1, le=200),
    featured: bool = False,
    category: str | None = None,
    rating: float = Query(0, ge=0, le=5),
    search: str | None = None,
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    """Published testimonials with optional keyword category and minimum rating."""
    testimonials = await repo.list_published(search=search)

    if rating > 0:
        testimonials = [t for t in testimonials if t.rating >= rating]
    if category and category != "all":
        testimonials = [t for t in testimonials if t.matches_category(category)]

    testimonials = testimonials[: FEATURED_LIMIT if featured else limit]
    return {
        "success": True,
        "data": [t.to_json() for t in testimonials],
        "total": len(testimonials),
    }
