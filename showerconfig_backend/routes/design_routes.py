from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.design_repository import DesignRepository
from ..schemas import (
    ApiResponse,
    CompositeOutput,
    CompositeRequest,
    RenderOutput,
    UserDesignCreate,
    UserDesignResponse,
    UserDesignUpdate,
)
from ..services.catalog_service import ConflictError, DomainError, NotFoundError
from ..services.design_service import DesignService

router = APIRouter(prefix="/api")


def get_design_service(db: AsyncSession = Depends(get_db)) -> DesignService:
    return DesignService(CatalogRepository(db), DesignRepository(db))


def _handle_domain_error(exc: Exception) -> None:
    if isinstance(exc, NotFoundError):
        code = 404
    elif isinstance(exc, ConflictError):
        code = 409
    else:
        code = 400
    raise HTTPException(status_code=code, detail={
                        "status": "error", "data": None, "error": str(exc)})


@router.post("/designs/composite", response_model=ApiResponse[CompositeOutput])
async def composite_design(payload: CompositeRequest, service: DesignService = Depends(get_design_service)):
    try:
        output = await service.composite(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=output)


@router.post("/designs/render", response_model=ApiResponse[RenderOutput])
async def render_design(payload: CompositeRequest, service: DesignService = Depends(get_design_service)):
    try:
        output = await service.render_preview(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=output)


@router.post("/user-designs", response_model=ApiResponse[UserDesignResponse], status_code=status.HTTP_201_CREATED)
async def save_design(payload: UserDesignCreate, service: DesignService = Depends(get_design_service)):
    try:
        design = await service.save_design(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=design)


@router.get("/user-designs", response_model=ApiResponse[list[UserDesignResponse]])
async def list_designs(
    email: str | None = None,
    shower_type_id: int | None = None,
    service: DesignService = Depends(get_design_service),
):
    try:
        designs = await service.list_designs(email, shower_type_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=designs)


@router.get("/user-designs/{design_id}", response_model=ApiResponse[UserDesignResponse])
async def get_design(design_id: int, service: DesignService = Depends(get_design_service)):
    try:
        design = await service.get_design(design_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=design)


@router.patch("/user-designs/{design_id}", response_model=ApiResponse[UserDesignResponse])
async def update_design(design_id: int, payload: UserDesignUpdate, service: DesignService = Depends(get_design_service)):
    try:
        design = await service.update_design(design_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=design)


@router.delete("/user-designs/{design_id}", response_model=ApiResponse[dict])
async def delete_design(design_id: int, service: DesignService = Depends(get_design_service)):
    try:
        await service.delete_design(design_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


@router.get("/user-designs/{design_id}/composite", response_model=ApiResponse[CompositeOutput])
async def composite_saved_design(design_id: int, service: DesignService = Depends(get_design_service)):
    try:
        output = await service.composite_saved(design_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=output)
