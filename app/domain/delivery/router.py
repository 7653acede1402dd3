"""Delivery router - Admin CEP range management and public CEP check"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ...auth import AdminPrincipal, get_current_admin
from ...database import get_db
from ...models import StoreCepRange
from ...rate_limiter import public_lookup_limit
from .schemas import CepRangeCreate, CepRangeResponse, CepValidationResponse
from .service import DeliveryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cep-ranges", tags=["Delivery"])
public_router = APIRouter(prefix="/catalog", tags=["Catalog"])


def get_delivery_service(db: Session = Depends(get_db)) -> DeliveryService:
    """Dependency injection for DeliveryService"""
    return DeliveryService(db)


def _to_response(cep_range: StoreCepRange) -> CepRangeResponse:
    return CepRangeResponse(
        id=cep_range.id,
        cepStart=cep_range.cep_start,
        cepEnd=cep_range.cep_end,
        createdAt=cep_range.created_at,
    )


@router.get("", response_model=list[CepRangeResponse])
async def list_cep_ranges(
    admin: AdminPrincipal = Depends(get_current_admin),
    service: DeliveryService = Depends(get_delivery_service),
):
    """List delivery ranges. An empty list means the store delivers everywhere"""
    return [_to_response(r) for r in service.list_ranges(admin.store_id)]


@router.post("", response_model=CepRangeResponse, status_code=status.HTTP_201_CREATED)
async def add_cep_range(
    data: CepRangeCreate,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: DeliveryService = Depends(get_delivery_service),
):
    return _to_response(service.add_range(admin.store_id, data.cepStart, data.cepEnd))


@router.delete("/{range_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cep_range(
    range_id: str,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: DeliveryService = Depends(get_delivery_service),
):
    service.delete_range(admin.store_id, range_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get(
    "/{slug}/validate-cep",
    response_model=CepValidationResponse,
    dependencies=[Depends(public_lookup_limit)],
)
async def validate_cep(
    slug: str,
    cep: str = Query(..., description="CEP with or without mask"),
    service: DeliveryService = Depends(get_delivery_service),
):
    """Check whether a store delivers to a CEP (public, no auth)"""
    return service.validate_cep(slug, cep)
