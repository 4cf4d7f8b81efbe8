# phm/routers/boilers.py
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user, require_admin
from phm.core.errors import NotFoundError
from phm.db import get_db
from phm.models.boiler import BoilerSpecification
from phm.models.user import User
from phm.schemas.boiler import BoilerCreate, BoilerIdentifyIn, BoilerOut, BoilerType, BoilerUpdate, FuelType
from phm.schemas.common import PageParams
from phm.services.pagination import paginate
from phm.services.tenancy import apply_update

router = APIRouter(prefix="/api/boilers", tags=["boilers"])

REQUIRED = ("manufacturer", "model", "fuel_type", "boiler_type", "is_active")


def _boiler_or_404(db: Session, boiler_id: int) -> BoilerSpecification:
    boiler = db.query(BoilerSpecification).filter(BoilerSpecification.id == boiler_id).first()
    if boiler is None:
        raise NotFoundError("Boiler specification")
    return boiler


@router.get("")
@router.get("/search")
def search_boilers(
    query: Optional[str] = None,
    manufacturer: Optional[str] = None,
    fuel_type: Optional[FuelType] = Query(None, alias="fuelType"),
    boiler_type: Optional[BoilerType] = Query(None, alias="boilerType"),
    min_output_kw: Optional[Decimal] = Query(None, alias="minOutputKw"),
    max_output_kw: Optional[Decimal] = Query(None, alias="maxOutputKw"),
    is_active: bool = Query(True, alias="isActive"),
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Catalog search. The total counts the filtered set, not the whole table."""
    q = db.query(BoilerSpecification).filter(BoilerSpecification.is_active == is_active)
    if query:
        term = f"%{query}%"
        q = q.filter(or_(BoilerSpecification.manufacturer.ilike(term), BoilerSpecification.model.ilike(term)))
    if manufacturer:
        q = q.filter(BoilerSpecification.manufacturer == manufacturer)
    if fuel_type:
        q = q.filter(BoilerSpecification.fuel_type == fuel_type)
    if boiler_type:
        q = q.filter(BoilerSpecification.boiler_type == boiler_type)
    if min_output_kw is not None:
        q = q.filter(BoilerSpecification.output_kw >= min_output_kw)
    if max_output_kw is not None:
        q = q.filter(BoilerSpecification.output_kw <= max_output_kw)

    q = q.order_by(BoilerSpecification.manufacturer.asc(), BoilerSpecification.model.asc())
    return paginate(q, paging, BoilerOut.model_validate)


@router.get("/manufacturers")
def list_manufacturers(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = (
        db.query(BoilerSpecification.manufacturer)
        .filter(BoilerSpecification.is_active.is_(True))
        .distinct()
        .order_by(BoilerSpecification.manufacturer.asc())
        .all()
    )
    return {"data": [r[0] for r in rows]}


@router.post("/identify")
def identify_boiler(
    payload: Optional[BoilerIdentifyIn] = None,
    user: User = Depends(get_current_user),
):
    # TODO: call a vision model on payload.image_url and match against the catalog
    return {"data": {"suggestions": []}, "message": "Boiler identification from photos coming soon"}


@router.get("/{boiler_id}")
def get_boiler(
    boiler_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"data": BoilerOut.model_validate(_boiler_or_404(db, boiler_id))}


@router.get("/{boiler_id}/compatible")
def compatible_accessories(
    boiler_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    boiler = _boiler_or_404(db, boiler_id)
    return {
        "data": {
            "boiler": BoilerOut.model_validate(boiler),
            "compatible": {"cylinders": [], "controls": [], "filters": []},
        }
    }


# ----------------------------------------------------
# Catalog maintenance (admin)
# ----------------------------------------------------
@router.post("", status_code=201)
def create_boiler(
    payload: BoilerCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    boiler = BoilerSpecification(**payload.model_dump())
    db.add(boiler)
    db.commit()
    db.refresh(boiler)
    return {"data": BoilerOut.model_validate(boiler), "message": "Boiler specification created"}


@router.put("/{boiler_id}")
def update_boiler(
    boiler_id: int,
    payload: BoilerUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    boiler = _boiler_or_404(db, boiler_id)
    apply_update(boiler, payload, required=REQUIRED)
    db.commit()
    db.refresh(boiler)
    return {"data": BoilerOut.model_validate(boiler), "message": "Boiler specification updated"}


@router.delete("/{boiler_id}")
def deactivate_boiler(
    boiler_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    boiler = _boiler_or_404(db, boiler_id)
    boiler.is_active = False
    db.commit()
    return {"message": "Boiler specification deactivated successfully"}
