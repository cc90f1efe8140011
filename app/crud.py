import logging
import os
import secrets
from contextlib import contextmanager

import formats
import models
import schemas
from exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger("shortlinks.crud")

GENERATE_CODE_ATTEMPTS = max(1, int(os.getenv("GENERATE_CODE_ATTEMPTS", 3)))

INVALID_URL = "Invalid URL. Please provide a valid HTTP/HTTPS URL."
INVALID_CODE = "Invalid code. Must be 6-8 alphanumeric characters."
CODE_EXISTS = "Code already exists. Please choose a different code."
LINK_NOT_FOUND = "Link not found"


@contextmanager
def _store(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store failure while %s", action)
        raise StoreError() from exc


def generate_code(length: int = formats.GENERATED_CODE_LENGTH) -> str:
    return "".join(secrets.choice(formats.ALPHABET) for _ in range(length))

def create_link(db: Session, link_in: schemas.LinkCreate) -> models.Link:
    if not formats.is_valid_url(link_in.url):
        raise ValidationError(INVALID_URL)

    if link_in.code:
        if not formats.is_valid_code(link_in.code):
            raise ValidationError(INVALID_CODE)
        link = _insert_link(db, link_in.code, link_in.url)
        if link is None:
            raise ConflictError(CODE_EXISTS)
        return link

    for attempt in range(1, GENERATE_CODE_ATTEMPTS + 1):
        code = generate_code()
        link = _insert_link(db, code, link_in.url)
        if link is not None:
            return link
        logger.warning("Generated code %s already in use (attempt %d/%d)", code, attempt, GENERATE_CODE_ATTEMPTS)
    raise ConflictError(CODE_EXISTS)

def _insert_link(db: Session, code: str, target_url: str) -> models.Link | None:
    """Insert a link, returning None when the code is already taken.

    The existence check is only a shortcut; a concurrent insert of the same
    code is caught by the unique index and reported the same way.
    """
    if get_link(db, code):
        return None
    link = models.Link(code=code, target_url=target_url, clicks=0)
    with _store(db, f"creating link {code}"):
        try:
            db.add(link)
            db.commit()
        except IntegrityError:
            db.rollback()
            return None
        db.refresh(link)
    return link

def delete_link(db: Session, code: str) -> bool:
    with _store(db, f"deleting link {code}"):
        link = db.query(models.Link).filter_by(code=code).first()
        if not link:
            return False
        db.delete(link)
        db.commit()
    return True

def get_link(db: Session, code: str) -> models.Link | None:
    with _store(db, f"looking up link {code}"):
        return db.query(models.Link).filter_by(code=code).first()

def get_links(db: Session) -> list[models.Link]:
    with _store(db, "listing links"):
        return (
            db.query(models.Link)
            .order_by(models.Link.created_at.desc(), models.Link.id.desc())
            .all()
        )

def increment_click(db: Session, code: str) -> bool:
    """Add one click and touch last_clicked in a single UPDATE."""
    stmt = (
        update(models.Link)
        .where(models.Link.code == code)
        .values(clicks=models.Link.clicks + 1, last_clicked=func.now())
        .execution_options(synchronize_session=False)
    )
    with _store(db, f"counting click for {code}"):
        result = db.execute(stmt)
        db.commit()
    return result.rowcount > 0

def resolve_link(db: Session, code: str) -> str:
    link = get_link(db, code)
    if not link:
        raise NotFoundError(LINK_NOT_FOUND)
    target_url = link.target_url
    # The link may have been deleted between lookup and update
    if not increment_click(db, code):
        raise NotFoundError(LINK_NOT_FOUND)
    return target_url
