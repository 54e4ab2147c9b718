"""Read-only course endpoints for the dashboard.

Courses are created through the ``createCourse`` callable function.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.context import AppContext, get_context
from src.api.deps import Caller, require_user
from src.models.schemas import Course
from src.store import Document

router = APIRouter(prefix="/api/courses", tags=["courses"])


def _to_course(doc: Document) -> Course:
    return Course.model_validate({**doc, "id": doc.id})


@router.get("", response_model=list[Course])
async def list_courses(
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> list[Course]:
    """List courses, newest first."""
    return [_to_course(doc) for doc in await ctx.store.list("courses")]


@router.get("/{course_id}", response_model=Course)
async def get_course(
    course_id: str,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> Course:
    """Read one course."""
    doc = await ctx.store.get(f"courses/{course_id}")
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return _to_course(doc)
