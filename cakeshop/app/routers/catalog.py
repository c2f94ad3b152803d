"""Public catalog and price quotes; no sign-in required."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..pricing import price_breakdown
from ...data.database import get_db
from ...data.models import Cake
from ...schemas.io_models import CakeOut
from ...schemas.order_models import CakeConfiguration

router = APIRouter()


@router.get("/cakes")
async def list_cakes(
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    available: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Cake)
    if category and category != "all":
        query = query.filter(Cake.category == category)
    if featured:
        query = query.filter(Cake.featured.is_(True))
    # Only available cakes unless explicitly asked for everything
    if available is not False:
        query = query.filter(Cake.available.is_(True))
    cakes = query.order_by(Cake.featured.desc(), Cake.name.asc()).all()
    return {"success": True, "data": [CakeOut.model_validate(c) for c in cakes]}


@router.get("/cakes/{cake_id}")
async def get_cake(cake_id: int, db: Session = Depends(get_db)):
    cake = db.query(Cake).filter(Cake.id == cake_id).first()
    if cake is None:
        raise NotFoundError("Cake not found")
    return {"success": True, "data": CakeOut.model_validate(cake)}


@router.post("/pricing/quote")
async def quote(config: CakeConfiguration):
    return {"success": True, "data": price_breakdown(config)}
