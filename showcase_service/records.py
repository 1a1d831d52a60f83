import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistenceError

PENDING = "pending"
ANNOTATED = "annotated"

def new_submission_id() -> str:
    return "sub_" + uuid.uuid4().hex[:24]

def create_submission(db: Session, email: str, image: bytes, content_type: Optional[str]) -> str:
    submission_id = new_submission_id()
    try:
        db.execute(
            text("""INSERT INTO submissions (id, email, image, content_type, gemini_uri, status)
                     VALUES (:id, :email, :image, :content_type, NULL, :status)"""),
            {"id": submission_id, "email": email, "image": image,
             "content_type": content_type, "status": PENDING},
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"could not store submission for {email!r}: {e}") from e
    return submission_id

def mark_annotated(db: Session, submission_id: str, gemini_uri: str) -> None:
    """Record the Gemini reference and move the submission to ``annotated``.

    The reference is written once: only a ``pending`` row is updated.
    """
    if not gemini_uri:
        raise PersistenceError(f"empty gemini uri for {submission_id}")
    try:
        result = db.execute(
            text("""UPDATE submissions
                     SET gemini_uri=:uri, status=:annotated, updated_at=CURRENT_TIMESTAMP
                     WHERE id=:id AND status=:pending"""),
            {"id": submission_id, "uri": gemini_uri, "annotated": ANNOTATED, "pending": PENDING},
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"could not annotate {submission_id}: {e}") from e
    if result.rowcount == 0:
        raise PersistenceError(f"submission {submission_id} is missing or already annotated")

def get_submission(db: Session, submission_id: str) -> Optional[Dict[str, Any]]:
    try:
        row = db.execute(
            text("""SELECT id, email, image, content_type, gemini_uri, status
                     FROM submissions WHERE id=:id"""),
            {"id": submission_id},
        ).mappings().first()
    except SQLAlchemyError as e:
        raise PersistenceError(f"could not read {submission_id}: {e}") from e
    return dict(row) if row else None

def list_submissions(db: Session) -> List[Dict[str, Any]]:
    # natural store order, nothing sorts here
    try:
        rows = db.execute(
            text("SELECT email, image, content_type, gemini_uri FROM submissions")
        ).mappings().all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"could not list submissions: {e}") from e
    return [dict(r) for r in rows]
