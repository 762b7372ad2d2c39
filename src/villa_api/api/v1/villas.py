"""Villa routes.

Every route delegates to `VillaService` and returns its envelope as-is. The HTTP
status always equals the envelope's `statusCode`.
"""

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from villa_api.core.dependencies import get_villa_service
from villa_api.schemas.api_response import APIResponse
from villa_api.schemas.villa import VillaCreateDTO, VillaUpdateDTO
from villa_api.services.villa_service import VillaService

router = APIRouter(prefix="/api/VillaAPI", tags=["villas"])


def envelope_response(envelope: APIResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=envelope.status_code, content=envelope.to_content(), headers=headers)


@router.get("", name="get_villas", response_model=APIResponse)
async def get_villas(service: VillaService = Depends(get_villa_service)):
    return envelope_response(await service.list_villas())


@router.get("/{villa_id}", name="get_villa", response_model=APIResponse)
async def get_villa(villa_id: int, service: VillaService = Depends(get_villa_service)):
    return envelope_response(await service.get_villa(villa_id))


@router.post("", name="create_villa", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_villa(
    request: Request,
    payload: VillaCreateDTO | None = Body(default=None),
    service: VillaService = Depends(get_villa_service),
):
    envelope = await service.create_villa(payload)
    headers = None
    if envelope.status_code == status.HTTP_201_CREATED:
        headers = {"Location": str(request.url_for("get_villa", villa_id=envelope.result.id))}
    return envelope_response(envelope, headers)


@router.put("/{villa_id}", name="update_villa", response_model=APIResponse)
async def update_villa(
    villa_id: int,
    payload: VillaUpdateDTO | None = Body(default=None),
    service: VillaService = Depends(get_villa_service),
):
    return envelope_response(await service.update_villa(villa_id, payload))


@router.delete("/{villa_id}", name="delete_villa", response_model=APIResponse)
async def delete_villa(villa_id: int, service: VillaService = Depends(get_villa_service)):
    return envelope_response(await service.delete_villa(villa_id))
