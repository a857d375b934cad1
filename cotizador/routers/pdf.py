"""
PDF download endpoint.

GET /api/quotations/{quotation_id}/pdf — download the quotation document.

Supports auth via:
1. Authorization: Bearer <token> header (standard)
2. ?token=<jwt> query param (for window.open / direct download links)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..auth import security, user_from_access_token
from ..database import get_db
from ..identity import IdentityContext, resolve_role
from ..pdf_generator import generate_quotation_pdf, quotation_filename
from .quotations import get_visible_quotation

router = APIRouter(prefix="/quotations", tags=["pdf"])


def _identity_from_header_or_param(
    token: Optional[str] = Query(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> IdentityContext:
    raw = credentials.credentials if credentials is not None else token
    if not raw:
        raise HTTPException(
            status_code=401,
            detail="Autenticación requerida: envíe el encabezado Bearer o ?token=",
        )
    user = user_from_access_token(raw, db)
    return IdentityContext(lambda user_id: resolve_role(db, user_id), user)


@router.get("/{quotation_id}/pdf")
def download_pdf(
    quotation_id: int,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(_identity_from_header_or_param),
):
    """Returns: application/pdf, named quotation-<quote_number>.pdf"""
    quotation = get_visible_quotation(quotation_id, db, identity)
    pdf_bytes = generate_quotation_pdf(quotation)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{quotation_filename(quotation.quote_number)}"',
        },
    )
