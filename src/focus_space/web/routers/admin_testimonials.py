"""Back-office testimonial management routes."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request

from ...core.errors import NotFound, ValidationFailed
from ...db.repositories import TestimonialRepository
from ...models.testimonial import Testimonial
from ..deps import get_testimonial_repo, now, require_admin
from ..schemas import SortUpdate, TestimonialIn

router = APIRouter(
    prefix="/api/admin/testimonials",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def build_testimonial(
    changes: dict, base: Testimonial | None = None, now: datetime | None = None
) -> Testimonial:
    """Merge request fields over an existing testimonial and validate.

    Toggling is_published goes through set_published so published_at is
    stamped or cleared.
    """
    data = {"member_name": "", "content": "", **(base.to_dict() if base else {}), **changes}
    published = bool(data.pop("is_published", False))
    data["is_published"] = base.is_published if base else False

    testimonial = Testimonial.from_dict(
        data,
        id=base.id if base else None,
        created_at=base.created_at if base else None,
        updated_at=base.updated_at if base else None,
    )
    if published != testimonial.is_published:
        testimonial.set_published(published, now=now)

    errors = testimonial.validate()
    if errors:
        raise ValidationFailed("見證資料驗證失敗", errors=errors)
    return testimonial


async def _get_or_404(repo: TestimonialRepository, testimonial_id: int) -> Testimonial:
    testimonial = await repo.get(testimonial_id)
    if testimonial is None:
        raise NotFound("見證不存在")
    return testimonial


@router.get("")
async def list_testimonials(
    search: str | None = None,
    published: bool | None = None,
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    result = await repo.list_page(
        search=search,
        published=published,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": [t.to_json() for t in result.items],
        "pagination": result.pagination(),
    }


@router.post("", status_code=201)
async def create_testimonial(
    request: Request,
    payload: TestimonialIn,
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    testimonial = build_testimonial(payload.model_dump(exclude_none=True), now=now(request))
    testimonial = await repo.create(testimonial, now=now(request))
    return {"success": True, "message": "見證新增成功", "data": testimonial.to_json()}


@router.put("/sort")
async def sort_testimonials(
    request: Request,
    payload: SortUpdate,
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    """Bulk update sort orders."""
    if not payload.updates:
        raise ValidationFailed("沒有有效的更新資料")
    updated = await repo.update_sort_orders(
        [(item.id, item.sort_order) for item in payload.updates], now=now(request)
    )
    return {"success": True, "message": "排序更新成功", "updated": updated}


@router.get("/{testimonial_id}")
async def get_testimonial(
    testimonial_id: int,
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    testimonial = await _get_or_404(repo, testimonial_id)
    return {"success": True, "data": testimonial.to_json()}


@router.put("/{testimonial_id}")
async def update_testimonial(
    request: Request,
    testimonial_id: int,
    payload: TestimonialIn,
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    existing = await _get_or_404(repo, testimonial_id)
    changes = payload.model_dump(exclude_none=True)
    testimonial = build_testimonial(changes, base=existing, now=now(request))
    await repo.update(testimonial, now=now(request))
    return {"success": True, "message": "見證更新成功", "data": testimonial.to_json()}


@router.delete("/{testimonial_id}")
async def delete_testimonial(
    testimonial_id: int,
    repo: TestimonialRepository = Depends(get_testimonial_repo),
):
    await _get_or_404(repo, testimonial_id)
    await repo.delete(testimonial_id)
    return {"success": True, "message": "見證刪除成功"}
