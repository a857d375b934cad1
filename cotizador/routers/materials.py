from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db

router = APIRouter(prefix="/materials", tags=["materials"])


def _get_own_material(material_id: int, db: Session, user: models.User) -> models.RawMaterial:
    material = db.query(models.RawMaterial).filter(models.RawMaterial.id == material_id).first()
    if not material:
        raise HTTPException(status_code=404, detail="Materia prima no encontrada")
    if material.user_id != user.id:
        raise HTTPException(status_code=403, detail="No es su materia prima")
    return material


@router.get("/", response_model=List[schemas.RawMaterial])
def list_materials(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """The caller's materials, alphabetically."""
    return db.query(models.RawMaterial).filter(
        models.RawMaterial.user_id == current_user.id,
    ).order_by(models.RawMaterial.name).all()


@router.post("/", response_model=schemas.RawMaterial, status_code=201)
def create_material(
    material: schemas.RawMaterialCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    db_material = models.RawMaterial(user_id=current_user.id, **material.model_dump())
    db.add(db_material)
    db.commit()
    db.refresh(db_material)
    return db_material


@router.get("/{material_id}", response_model=schemas.RawMaterial)
def get_material(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return _get_own_material(material_id, db, current_user)


@router.put("/{material_id}", response_model=schemas.RawMaterial)
def update_material(
    material_id: int,
    update: schemas.RawMaterialUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """
    Update in place. Existing quotations are unaffected — their lines keep
    the cost that was current when they were created.
    """
    material = _get_own_material(material_id, db, current_user)
    for field, value in update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(material, field, value)
    db.commit()
    db.refresh(material)
    return material


@router.delete("/{material_id}")
def delete_material(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    material = _get_own_material(material_id, db, current_user)
    in_use = db.query(models.QuotationMaterial.id).filter(
        models.QuotationMaterial.raw_material_id == material.id,
    ).first()
    if in_use:
        raise HTTPException(
            status_code=409,
            detail="La materia prima está en uso por una cotización",
        )
    db.delete(material)
    db.commit()
    return {"ok": True}
