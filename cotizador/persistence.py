"""
Quotation persistence and row <-> dict mapping.

A quotation and its material lines are written in one transaction: either
both are committed or neither is, so a quotation without its lines never
survives a failed write. Quote-number collisions are retried with a fresh
number; everything else surfaces as PersistenceFailure.
"""

import logging
from typing import Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import PersistenceFailure
from .pricing_engine import PricedQuotation, generate_quote_number

logger = logging.getLogger(__name__)

QUOTE_NUMBER_ATTEMPTS = 3


def material_costs(db: Session, user_id: int) -> Dict[int, float]:
    """Current cost of every material the user owns, keyed by id."""
    rows = db.query(models.RawMaterial.id, models.RawMaterial.cost).filter(
        models.RawMaterial.user_id == user_id
    ).all()
    return {row.id: row.cost for row in rows}


def _quote_number_taken(db: Session, quote_number: str) -> bool:
    return db.query(models.Quotation.id).filter(
        models.Quotation.quote_number == quote_number
    ).first() is not None


def _write(db: Session, priced: PricedQuotation, user_id: int) -> models.Quotation:
    quotation = models.Quotation(
        quote_number=priced.quote_number,
        product_name=priced.product_name,
        product_type=priced.product_type,
        validity_days=priced.validity_days,
        total_cost=priced.total_cost,
        sale_price=priced.sale_price,
        profit_margin=priced.profit_margin,
        margin_percentage=priced.margin_percentage,
        user_id=user_id,
    )
    db.add(quotation)
    db.flush()

    for line in priced.lines:
        db.add(models.QuotationMaterial(
            quotation_id=quotation.id,
            raw_material_id=line.material_id,
            percentage=line.percentage,
            cost=line.cost,
        ))
    db.flush()
    db.commit()
    db.refresh(quotation)
    return quotation


def save_quotation(
    db: Session,
    priced: PricedQuotation,
    user_id: int,
    regenerate_number: Callable[[], str] = generate_quote_number,
) -> models.Quotation:
    """
    Persist a priced quotation with all its lines.

    Raises:
        PersistenceFailure: the write was rolled back; nothing was stored.
    """
    for attempt in range(1, QUOTE_NUMBER_ATTEMPTS + 1):
        try:
            quotation = _write(db, priced, user_id)
        except IntegrityError as e:
            db.rollback()
            try:
                collided = _quote_number_taken(db, priced.quote_number)
            except SQLAlchemyError as lookup_error:
                db.rollback()
                logger.exception("Could not check quote number %s", priced.quote_number)
                raise PersistenceFailure() from lookup_error
            if not collided:
                logger.exception("Quotation %s rejected by the database", priced.quote_number)
                raise PersistenceFailure() from e
            logger.warning(
                "Quote number %s already in use (attempt %d/%d), regenerating",
                priced.quote_number, attempt, QUOTE_NUMBER_ATTEMPTS,
            )
            priced = priced.model_copy(update={"quote_number": regenerate_number()})
            continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Could not save quotation %s", priced.quote_number)
            raise PersistenceFailure() from e

        logger.info(
            "Saved quotation %s for user %s (%d lines)",
            quotation.quote_number, user_id, len(priced.lines),
        )
        return quotation

    logger.error("Gave up after %d quote number collisions", QUOTE_NUMBER_ATTEMPTS)
    raise PersistenceFailure()


# --- Mapping ---

def _line_to_dict(line: models.QuotationMaterial) -> dict:
    material: Optional[models.RawMaterial] = line.raw_material
    return {
        "id": line.id,
        "raw_material_id": line.raw_material_id,
        "material_name": material.name if material else None,
        "unit": material.unit.value if material and material.unit else None,
        "percentage": line.percentage,
        "cost": line.cost,
    }


def quotation_to_dict(q: models.Quotation, include_lines: bool = True) -> dict:
    data = {
        "id": q.id,
        "quote_number": q.quote_number,
        "product_name": q.product_name,
        "product_type": q.product_type.value if q.product_type else None,
        "validity_days": q.validity_days,
        "total_cost": q.total_cost,
        "sale_price": q.sale_price,
        "profit_margin": q.profit_margin,
        "margin_percentage": q.margin_percentage,
        "user_id": q.user_id,
        "created_at": q.created_at.isoformat() if q.created_at else None,
    }
    if include_lines:
        data["lines"] = [_line_to_dict(line) for line in q.lines]
    return data
