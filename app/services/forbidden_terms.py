"""Forbidden-term storage and lookup."""
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import DuplicateForbiddenTermError, ForbiddenTermNotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.moderation import ForbiddenTerm
from app.services.moderation_filter import PhraseEntry, clean_phrase, match_forbidden, normalize

logger = get_logger(__name__)


async def list_forbidden_terms(db: AsyncSession) -> list[ForbiddenTerm]:
    result = await db.execute(
        select(ForbiddenTerm)
        .order_by(desc(ForbiddenTerm.created_at))
        .options(selectinload(ForbiddenTerm.created_by))
    )
    return list(result.scalars().all())


async def create_forbidden_term(
    db: AsyncSession,
    phrase: str,
    created_by_id: UUID | None = None,
) -> ForbiddenTerm:
    """Store a new phrase. Rejects phrases whose normalized form is already stored."""
    cleaned = clean_phrase(phrase or "")
    if not cleaned:
        raise ValidationError("The word or phrase cannot be empty.", field="phrase")
    if len(cleaned) > settings.MAX_FORBIDDEN_TERM_LENGTH:
        raise ValidationError(
            f"Forbidden terms are limited to {settings.MAX_FORBIDDEN_TERM_LENGTH} characters.",
            field="phrase",
        )
    normalized = normalize(cleaned)
    if not normalized:
        raise ValidationError("The word or phrase is not valid.", field="phrase")
    # NFKD can expand ligatures and compatibility characters past the column size.
    if len(normalized) > settings.MAX_FORBIDDEN_TERM_LENGTH:
        raise ValidationError(
            f"Forbidden terms are limited to {settings.MAX_FORBIDDEN_TERM_LENGTH} characters.",
            field="phrase",
        )

    result = await db.execute(select(ForbiddenTerm).where(ForbiddenTerm.normalized_phrase == normalized))
    existing = result.scalar_one_or_none()
    if existing:
        raise DuplicateForbiddenTermError(existing.phrase)

    term = ForbiddenTerm(phrase=cleaned, normalized_phrase=normalized, created_by_id=created_by_id)
    db.add(term)
    await db.flush()
    await db.refresh(term, attribute_names=["created_by"])
    logger.info("forbidden_term_created", term_id=str(term.id), created_by=str(created_by_id) if created_by_id else None)
    return term


async def delete_forbidden_term(db: AsyncSession, term_id: UUID) -> None:
    term = await db.get(ForbiddenTerm, term_id)
    if term is None:
        raise ForbiddenTermNotFoundError()
    await db.delete(term)
    await db.flush()
    logger.info("forbidden_term_deleted", term_id=str(term_id))


async def get_phrase_entries(db: AsyncSession) -> list[PhraseEntry]:
    """All stored phrases, read fresh on every call so rule changes apply at once."""
    result = await db.execute(select(ForbiddenTerm.phrase, ForbiddenTerm.normalized_phrase))
    return [
        PhraseEntry(phrase=phrase, normalized=normalized_phrase or normalize(phrase))
        for phrase, normalized_phrase in result.all()
    ]


async def detect_forbidden_phrase(db: AsyncSession, text: str | None) -> PhraseEntry | None:
    entries = await get_phrase_entries(db)
    if not entries:
        return None
    return match_forbidden(text, entries)


async def find_forbidden_phrase_in_inputs(db: AsyncSession, values: list[str | None]) -> PhraseEntry | None:
    """First forbidden phrase found in any of ``values`` (e.g. several form fields)."""
    if not values:
        return None
    entries = await get_phrase_entries(db)
    if not entries:
        return None
    for value in values:
        match = match_forbidden(value, entries)
        if match:
            return match
    return None
