from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ..schemas import ApiResponse, UploadDelete, UploadOutput
from ..services.catalog_service import DomainError, NotFoundError
from ..services.upload_service import UploadService

router = APIRouter(prefix="/api")


def get_upload_service() -> UploadService:
    return UploadService()


def _handle_domain_error(exc: Exception) -> None:
    code = 404 if isinstance(exc, NotFoundError) else 400
    raise HTTPException(status_code=code, detail={
                        "status": "error", "data": None, "error": str(exc)})


@router.post("/upload", response_model=ApiResponse[UploadOutput], status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Form(...),
    existing_image_url: str | None = Form(None),
    service: UploadService = Depends(get_upload_service),
):
    try:
        output = await service.save_image(file.file, file.filename, folder, existing_image_url)
    except DomainError as exc:
        _handle_domain_error(exc)
    finally:
        await file.close()
    return ApiResponse(data=output)


@router.delete("/upload", response_model=ApiResponse[dict])
async def delete_image(payload: UploadDelete, service: UploadService = Depends(get_upload_service)):
    try:
        await service.delete_image(payload.image_url)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})
