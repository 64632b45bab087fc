"""
Rating ledger: the only place a participant's rating changes.

A slate's summed rating delta is applied at most once per
(participant, slate):

  1. An existing RatingApplication row short-circuits the call.
  2. Otherwise the rating is incremented in SQL (``rating = rating + delta``,
     so concurrent slates for the same participant do not lose updates) and
     the application row is inserted in the same transaction.
  3. A concurrent duplicate trips the (participant_id, slate_id) unique
     constraint; the transaction is rolled back and the call reports
     ``applied=False``.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rightcall.core.rating import BASE_RATING
from rightcall.models import Participant, RatingApplication

logger = logging.getLogger(__name__)


@dataclass
class LedgerResult:
    participant: str
    slate_id: str
    delta: int
    rating_before: int
    rating_after: int
    applied: bool
    picks_settled: int = 0
    picks_won: int = 0
    display_points: int = 0


def get_participant(db: Session, name: str) -> Optional[Participant]:
    return db.query(Participant).filter(Participant.name == name).first()


def get_or_create_participant(db: Session, name: str, base_rating: int = BASE_RATING) -> Participant:
    """Return the participant, creating it at ``base_rating`` on first use."""
    participant = get_participant(db, name)
    if participant is not None:
        return participant

    participant = Participant(name=name, rating=base_rating)
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        # Created concurrently by another request
        db.rollback()
        return get_participant(db, name)

    db.refresh(participant)
    logger.info("Participant created: %s @ %d", name, base_rating)
    return participant


def _find_application(db: Session, participant_id: int, slate_id: str) -> Optional[RatingApplication]:
    return (
        db.query(RatingApplication)
        .filter(
            RatingApplication.participant_id == participant_id,
            RatingApplication.slate_id == slate_id,
        )
        .first()
    )


def _already_applied(name: str, app: RatingApplication) -> LedgerResult:
    return LedgerResult(
        participant=name,
        slate_id=app.slate_id,
        delta=app.delta,
        rating_before=app.rating_before,
        rating_after=app.rating_after,
        applied=False,
        picks_settled=app.picks_settled,
        picks_won=app.picks_won,
        display_points=app.display_points,
    )


def apply_slate_delta(
    db: Session,
    name: str,
    slate_id: str,
    delta: int,
    picks_settled: int = 0,
    picks_won: int = 0,
    display_points: int = 0,
    base_rating: int = BASE_RATING,
) -> LedgerResult:
    """
    Add ``delta`` to the participant's rating unless this slate was already applied.

    When the slate was already applied the stored application (delta, pick
    counts and display points) is echoed back with ``applied=False`` and the
    rating is left untouched.
    """
    participant = get_or_create_participant(db, name, base_rating)

    existing = _find_application(db, participant.id, slate_id)
    if existing is not None:
        logger.info("Slate %s already applied for %s; skipping", slate_id, name)
        return _already_applied(name, existing)

    try:
        (
            db.query(Participant)
            .filter(Participant.id == participant.id)
            .update({Participant.rating: Participant.rating + delta}, synchronize_session=False)
        )
        rating_after = db.query(Participant.rating).filter(Participant.id == participant.id).scalar()
        rating_before = rating_after - delta

        db.add(RatingApplication(
            participant_id=participant.id,
            slate_id=slate_id,
            delta=delta,
            picks_settled=picks_settled,
            picks_won=picks_won,
            display_points=display_points,
            rating_before=rating_before,
            rating_after=rating_after,
        ))
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_application(db, participant.id, slate_id)
        logger.warning("Concurrent settlement of slate %s for %s rejected", slate_id, name)
        return _already_applied(name, existing)

    db.refresh(participant)
    logger.info(
        "Rating applied: %s slate %s | %+d (%d → %d, %d picks)",
        name, slate_id, delta, rating_before, rating_after, picks_settled,
    )
    return LedgerResult(
        participant=name,
        slate_id=slate_id,
        delta=delta,
        rating_before=rating_before,
        rating_after=rating_after,
        applied=True,
        picks_settled=picks_settled,
        picks_won=picks_won,
        display_points=display_points,
    )


def list_applications(db: Session, name: str) -> List[RatingApplication]:
    participant = get_participant(db, name)
    if participant is None:
        return []
    return (
        db.query(RatingApplication)
        .filter(RatingApplication.participant_id == participant.id)
        .order_by(RatingApplication.applied_at, RatingApplication.id)
        .all()
    )
