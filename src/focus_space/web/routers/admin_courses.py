"""Back-office course management routes."""

import logging

from fastapi import APIRouter, Depends, Query, Request

from ...core.errors import NotFound, ValidationFailed
from ...db.repositories import CourseRepository
from ...models.course import Course, CourseCategory
from ..deps import actor_name, get_course_repo, now, require_admin
from ..schemas import CourseIn

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/courses",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def build_course(changes: dict, base: Course | None = None) -> Course:
    """Merge request fields over an existing course and validate the result."""
    data = {"title": "", "description": "", **(base.to_dict() if base else {}), **changes}
    if data.get("category") == CourseCategory.PERSONAL.value:
        data["max_participants"] = 1

    try:
        course = Course.from_dict(
            data,
            id=base.id if base else None,
            created_at=base.created_at if base else None,
            updated_at=base.updated_at if base else None,
        )
    except (ValueError, TypeError) as e:
        raise ValidationFailed("課程資料驗證失敗", errors={"course": str(e)}) from e

    errors = course.validate()
    if errors:
        raise ValidationFailed("課程資料驗證失敗", errors=errors)
    return course


async def _get_or_404(repo: CourseRepository, course_id: int) -> Course:
    course = await repo.get(course_id)
    if course is None:
        raise NotFound("課程不存在")
    return course


@router.get("")
async def list_courses(
    category: CourseCategory | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    sort_by: str = "display_order",
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    repo: CourseRepository = Depends(get_course_repo),
):
    result = await repo.list_page(
        category=category,
        is_active=is_active,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": {
            "courses": [c.to_json() for c in result.items],
            "pagination": result.pagination(),
        },
    }


@router.post("", status_code=201)
async def create_course(
    request: Request,
    payload: CourseIn,
    user: dict = Depends(require_admin),
    repo: CourseRepository = Depends(get_course_repo),
):
    changes = payload.model_dump(exclude_none=True)
    changes["created_by"] = changes["updated_by"] = actor_name(user)
    course = await repo.create(build_course(changes), now=now(request))
    logger.info("Course %s created by %s", course.id, actor_name(user))
    return {"success": True, "message": "課程創建成功", "data": course.to_json()}


@router.get("/{course_id}")
async def get_course(course_id: int, repo: CourseRepository = Depends(get_course_repo)):
    course = await _get_or_404(repo, course_id)
    return {"success": True, "data": course.to_json()}


@router.put("/{course_id}")
async def update_course(
    request: Request,
    course_id: int,
    payload: CourseIn,
    user: dict = Depends(require_admin),
    repo: CourseRepository = Depends(get_course_repo),
):
    existing = await _get_or_404(repo, course_id)
    changes = payload.model_dump(exclude_none=True)
    changes["updated_by"] = actor_name(user)
    course = build_course(changes, base=existing)
    await repo.update(course, now=now(request))
    return {"success": True, "message": "課程更新成功", "data": course.to_json()}


@router.delete("/{course_id}")
async def deactivate_course(
    request: Request,
    course_id: int,
    user: dict = Depends(require_admin),
    repo: CourseRepository = Depends(get_course_repo),
):
    """Soft delete: the course is deactivated so booking snapshots stay valid."""
    course = await _get_or_404(repo, course_id)
    course.is_active = False
    course.updated_by = actor_name(user)
    await repo.update(course, now=now(request))
    logger.info("Course %s deactivated by %s", course_id, course.updated_by)
    return {"success": True, "message": "課程已停用"}
