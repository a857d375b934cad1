import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models
from ..database import get_db
from ..errors import PersistenceFailure, ValidationError
from ..identity import IdentityContext, get_identity
from ..persistence import material_costs, quotation_to_dict, save_quotation
from ..pricing_engine import Allocation, PricingEngine, ProductInfo
from ..schemas import QuotationCreate, QuotationPreview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotations", tags=["quotations"])


def _engine_for(db: Session, user: models.User) -> PricingEngine:
    """Costs are looked up among the user's own materials, read once per request."""
    return PricingEngine(material_costs(db, user.id).get)


def _allocations(items) -> list:
    return [Allocation(material_id=i.material_id, percentage=i.percentage) for i in items]


def get_visible_quotation(quotation_id: int, db: Session, identity: IdentityContext) -> models.Quotation:
    """Owner or admin; 404 when missing, 403 otherwise."""
    quotation = db.query(models.Quotation).filter(models.Quotation.id == quotation_id).first()
    if not quotation:
        raise HTTPException(status_code=404, detail="Cotización no encontrada")
    if quotation.user_id != identity.current_user.id and not identity.is_admin:
        raise HTTPException(status_code=403, detail="No es su cotización")
    return quotation


# --- Endpoints ---

@router.post("/preview")
def preview_quotation(
    draft: QuotationPreview,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
):
    """Live total cost and percentage sum while a draft is being composed."""
    engine = _engine_for(db, identity.current_user)
    return engine.preview(_allocations(draft.materials))


@router.post("/", status_code=201)
def create_quotation(
    request: QuotationCreate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
):
    user = identity.current_user
    engine = _engine_for(db, user)
    product = ProductInfo(
        name=request.product_name,
        product_type=request.product_type,
        validity_days=request.validity_days,
    )

    try:
        priced = engine.price(product, request.margin_percentage, _allocations(request.materials))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        quotation = save_quotation(db, priced, user.id, engine.quote_number_factory)
    except PersistenceFailure as e:
        # Cause already logged by the persistence layer
        raise HTTPException(status_code=500, detail=str(e))

    return quotation_to_dict(quotation)


@router.get("/")
def list_quotations(
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
):
    """The caller's quotations, newest first."""
    quotations = db.query(models.Quotation).filter(
        models.Quotation.user_id == identity.current_user.id,
    ).order_by(
        models.Quotation.created_at.desc(), models.Quotation.id.desc(),
    ).offset(skip).limit(limit).all()
    return [quotation_to_dict(q, include_lines=False) for q in quotations]


@router.get("/{quotation_id}")
def get_quotation(
    quotation_id: int,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
):
    return quotation_to_dict(get_visible_quotation(quotation_id, db, identity))
