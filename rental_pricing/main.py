import logging
import traceback as _tb
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, selectinload

from rental_pricing.config import EQUIPMENT_STATUSES, LOG_LEVEL, MAX_QUANTITY, MAX_RENTAL_DAYS
from rental_pricing.database import get_db, init_db
from rental_pricing.models import Equipment, RentalPeriodRow
from rental_pricing.schemas import (
    BatchQuoteRequest,
    BatchQuoteResponse,
    EquipmentCreateRequest,
    EquipmentResponse,
    PriceQuoteResponse,
    QuoteItemResponse,
    RentalPeriodResponse,
    RentalPeriodsUpdateRequest,
)
from rental_pricing.services.pricing import (
    EquipmentNotFoundError,
    PricingError,
    as_rental_period,
    calculate_multiple_rental_prices,
    calculate_rental_price,
    load_equipment,
)
from rental_pricing.services.rental_days import calculate_rental_days
from rental_pricing.services.rental_periods import (
    default_period_label,
    normalize_rental_periods,
    replace_rental_periods,
)
from rental_pricing.utils import format_brl, money_to_float


logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("rental-pricing")

app = FastAPI(title="Equipment Rental Pricing")


@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s:\n%s", request.method, request.url.path, _tb.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc), "type": type(exc).__name__})


def period_to_response(period) -> RentalPeriodResponse:
    snapshot = as_rental_period(period)
    return RentalPeriodResponse(
        id=snapshot.id,
        days=snapshot.days,
        price=money_to_float(snapshot.price),
        label=snapshot.label,
        display_label=snapshot.label or default_period_label(snapshot.days),
        price_per_day=money_to_float(snapshot.daily_rate),
    )


def equipment_to_response(equipment: Equipment) -> EquipmentResponse:
    return EquipmentResponse(
        id=equipment.id,
        name=equipment.name,
        category=equipment.category,
        description=equipment.description,
        price_per_day=money_to_float(equipment.price_per_day),
        quantity=equipment.quantity,
        status=equipment.status,
        created_at=equipment.created_at,
        rental_periods=[period_to_response(row) for row in equipment.rental_periods],
    )


def get_equipment_or_404(db: Session, equipment_id: int) -> Equipment:
    try:
        return load_equipment(db, equipment_id)
    except EquipmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Equipment not found") from exc


def resolve_rental_days(
    days: Optional[int],
    start_date: Optional[date],
    end_date: Optional[date],
) -> int:
    if days is not None:
        if start_date is not None or end_date is not None:
            raise HTTPException(status_code=400, detail="Provide either days or start_date/end_date, not both.")
        return days
    if start_date is None or end_date is None:
        raise HTTPException(status_code=400, detail="Provide either days or both start_date and end_date.")
    try:
        resolved = calculate_rental_days(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if resolved > MAX_RENTAL_DAYS:
        raise HTTPException(status_code=400, detail=f"Rental length is limited to {MAX_RENTAL_DAYS} days.")
    return resolved


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info("Database ready")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/equipments", response_model=list[EquipmentResponse])
def list_equipments(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[EquipmentResponse]:
    query = db.query(Equipment).options(selectinload(Equipment.rental_periods))
    if status_filter:
        normalized = status_filter.strip().upper()
        if normalized not in EQUIPMENT_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid equipment status.")
        query = query.filter(Equipment.status == normalized)
    equipments = query.order_by(Equipment.created_at.desc(), Equipment.id.desc()).all()
    return [equipment_to_response(equipment) for equipment in equipments]


@app.post("/api/equipments", response_model=EquipmentResponse, status_code=status.HTTP_201_CREATED)
def create_equipment(payload: EquipmentCreateRequest, db: Session = Depends(get_db)) -> EquipmentResponse:
    if not payload.name.strip() or not payload.category.strip():
        raise HTTPException(status_code=400, detail="Name and category are required.")
    try:
        periods = normalize_rental_periods(period.model_dump() for period in payload.rental_periods)
    except PricingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    equipment = Equipment(
        name=payload.name.strip(),
        category=payload.category.strip(),
        description=(payload.description or "").strip() or None,
        price_per_day=payload.price_per_day,
        quantity=payload.quantity,
        status="AVAILABLE",
        rental_periods=[
            RentalPeriodRow(days=period.days, price=period.price, label=period.label) for period in periods
        ],
    )
    db.add(equipment)
    db.commit()
    db.refresh(equipment)
    logger.info("Equipment created: id=%s name=%r periods=%d", equipment.id, equipment.name, len(periods))
    return equipment_to_response(equipment)


@app.get("/api/equipments/{equipment_id}", response_model=EquipmentResponse)
def get_equipment(equipment_id: int, db: Session = Depends(get_db)) -> EquipmentResponse:
    return equipment_to_response(get_equipment_or_404(db, equipment_id))


@app.put("/api/equipments/{equipment_id}/rental-periods", response_model=EquipmentResponse)
def update_rental_periods(
    equipment_id: int,
    payload: RentalPeriodsUpdateRequest,
    db: Session = Depends(get_db),
) -> EquipmentResponse:
    equipment = get_equipment_or_404(db, equipment_id)
    try:
        replace_rental_periods(db, equipment, (period.model_dump() for period in payload.rental_periods))
    except PricingError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return equipment_to_response(equipment)


@app.get("/api/equipments/{equipment_id}/price", response_model=PriceQuoteResponse)
def price_quote(
    equipment_id: int,
    days: Optional[int] = Query(default=None, gt=0, le=MAX_RENTAL_DAYS),
    quantity: int = Query(default=1, ge=1, le=MAX_QUANTITY),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
) -> PriceQuoteResponse:
    rental_days = resolve_rental_days(days, start_date, end_date)
    try:
        result = calculate_rental_price(db, equipment_id, rental_days, quantity)
    except EquipmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Equipment not found") from exc
    except PricingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return PriceQuoteResponse(
        equipment_id=equipment_id,
        days=rental_days,
        quantity=quantity,
        unit_price=money_to_float(result.unit_price),
        total_price=money_to_float(result.total_price),
        total_price_text=format_brl(result.total_price),
        price_per_day=money_to_float(result.price_per_day),
        period_label=result.period_label,
        applied_period=period_to_response(result.applied_period) if result.applied_period else None,
    )


@app.post("/api/price-quote", response_model=BatchQuoteResponse)
def batch_price_quote(payload: BatchQuoteRequest, db: Session = Depends(get_db)) -> BatchQuoteResponse:
    try:
        quote = calculate_multiple_rental_prices(
            db,
            (item.model_dump() for item in payload.items),
            payload.days,
        )
    except EquipmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Equipment {exc.equipment_id} not found") from exc
    except PricingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return BatchQuoteResponse(
        days=payload.days,
        items=[
            QuoteItemResponse(
                equipment_id=item["equipment_id"],
                quantity=item["quantity"],
                unit_price=money_to_float(item["unit_price"]),
                total_price=money_to_float(item["total_price"]),
                period_label=item["period_label"],
            )
            for item in quote["items"]
        ],
        grand_total=money_to_float(quote["grand_total"]),
        grand_total_text=format_brl(quote["grand_total"]),
    )
