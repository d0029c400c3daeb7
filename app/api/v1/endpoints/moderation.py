"""Forbidden-term administration (superadmin only)."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_superadmin, get_db
from app.models.moderation import ForbiddenTerm
from app.models.user import User
from app.schemas.moderation import ForbiddenTermCreate, ForbiddenTermCreator, ForbiddenTermResponse
from app.services.forbidden_terms import create_forbidden_term, delete_forbidden_term, list_forbidden_terms

router = APIRouter(prefix="/moderation/forbidden-terms", tags=["moderation"])


def term_to_response(term: ForbiddenTerm) -> ForbiddenTermResponse:
    creator = term.created_by
    return ForbiddenTermResponse(
        id=term.id,
        phrase=term.phrase,
        normalized_phrase=term.normalized_phrase,
        created_at=term.created_at,
        created_by=ForbiddenTermCreator(id=creator.id, name=creator.name) if creator else None,
    )


@router.get("", response_model=list[ForbiddenTermResponse])
async def list_terms(
    _: User = Depends(get_current_superadmin),
    db: AsyncSession = Depends(get_db),
):
    return [term_to_response(t) for t in await list_forbidden_terms(db)]


@router.post("", response_model=ForbiddenTermResponse, status_code=status.HTTP_201_CREATED)
async def add_term(
    data: ForbiddenTermCreate,
    current_user: User = Depends(get_current_superadmin),
    db: AsyncSession = Depends(get_db),
):
    term = await create_forbidden_term(db, data.phrase, created_by_id=current_user.id)
    return term_to_response(term)


@router.delete("/{term_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_term(
    term_id: UUID,
    _: User = Depends(get_current_superadmin),
    db: AsyncSession = Depends(get_db),
):
    await delete_forbidden_term(db, term_id)
