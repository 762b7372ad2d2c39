"""
Villa request logic: validates inputs, drives the repository and builds the envelope.

Errors are handled in two tiers:

1. Expected conditions (bad id, missing payload, id mismatch, unknown villa, duplicate
   name) raise a typed `RepositoryError` subclass where they are detected.
2. `_respond()` is the only place an exception becomes an envelope. A `RepositoryError`
   keeps its own status (400/404/500); any other exception is a 500 whose sole
   message is the exception text, unchanged.

Every public method returns an `APIResponse` and never raises.
"""
import logging
from typing import Awaitable, Callable
from datetime import datetime

from fastapi import status

from villa_api.exceptions.base import (
    DuplicateError,
    InvalidInputError,
    NotFoundError,
    RepositoryError,
)
from villa_api.mappers.villa_mapper import VillaMapper
from villa_api.models.villa import Villa
from villa_api.repositories.villa_repository import VillaRepository
from villa_api.schemas.api_response import APIResponse
from villa_api.schemas.villa import VillaCreateDTO, VillaUpdateDTO
from villa_api.utils.clock import utcnow

logger = logging.getLogger(__name__)

DUPLICATE_VILLA_MESSAGE = "Villa already exists!"

# Largest id an INTEGER primary key can hold (signed 64-bit)
MAX_VILLA_ID = 2**63 - 1


class VillaService:

    def __init__(self, repository: VillaRepository, clock: Callable[[], datetime] = utcnow):
        self.repository = repository
        self._clock = clock

    async def _respond(self, operation: str, handler: Callable[[], Awaitable[APIResponse]]) -> APIResponse:
        try:
            return await handler()
        except RepositoryError as exc:
            status_code = exc.http_status()
            if status_code >= 500:
                logger.error(
                    "villa.%s.failed" % operation,
                    extra={"operation": operation, "error_code": exc.error_code, "status_code": status_code},
                )
            else:
                logger.info(
                    "villa.%s.rejected" % operation,
                    extra={"operation": operation, "error_code": exc.error_code, "status_code": status_code},
                )
            return APIResponse.failure(status_code, exc.message)
        except Exception as exc:
            logger.exception("villa.%s.unexpected" % operation, extra={"operation": operation})
            return APIResponse.failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or type(exc).__name__)

    @staticmethod
    def _require_valid_id(villa_id: int) -> None:
        if villa_id is None or villa_id <= 0:
            raise InvalidInputError(f"Invalid villa id: {villa_id}", fields=["id"])

    async def _find_villa(self, villa_id: int, tracked: bool) -> Villa:
        """The stored villa, or NotFoundError. Ids past the store's integer range cannot exist."""
        villa = None
        if villa_id <= MAX_VILLA_ID:
            villa = await self.repository.get_by_id(villa_id, tracked=tracked)
        if villa is None:
            raise NotFoundError(f"Villa with ID {villa_id} not found", fields=["id"])
        return villa

    # =================================================================================================================
    # Operations
    # =================================================================================================================

    async def list_villas(self) -> APIResponse:
        async def handler() -> APIResponse:
            villas = await self.repository.get_all()
            return APIResponse.success([VillaMapper.to_dto(v) for v in villas], status.HTTP_200_OK)

        return await self._respond("list", handler)

    async def get_villa(self, villa_id: int) -> APIResponse:
        async def handler() -> APIResponse:
            self._require_valid_id(villa_id)
            villa = await self._find_villa(villa_id, tracked=False)
            return APIResponse.success(VillaMapper.to_dto(villa), status.HTTP_200_OK)

        return await self._respond("get", handler)

    async def create_villa(self, payload: VillaCreateDTO | None) -> APIResponse:
        """
        Create a villa unless one with the same name exists.

        The name check and the insert are separate statements, so two concurrent
        creates with one name can both succeed.
        """
        async def handler() -> APIResponse:
            if payload is None:
                raise InvalidInputError("Villa payload is required")

            if await self.repository.name_exists(payload.name):
                logger.info("villa.create.duplicate", extra={"operation": "create", "fields": ["name"]})
                raise DuplicateError(DUPLICATE_VILLA_MESSAGE, fields=["name"])

            villa = VillaMapper.to_entity(payload)
            villa.created_date = villa.updated_date = self._clock()
            villa = await self.repository.create(villa)
            await self.repository.save()

            logger.info("villa.create.success", extra={"operation": "create", "id": villa.id})
            return APIResponse.success(VillaMapper.to_dto(villa), status.HTTP_201_CREATED)

        return await self._respond("create", handler)

    async def update_villa(self, villa_id: int, payload: VillaUpdateDTO | None) -> APIResponse:
        """
        Replace every field of villa `villa_id` with `payload`.

        `created_date` is carried over from the stored row and `updated_date` is
        re-stamped with the service clock.
        """
        async def handler() -> APIResponse:
            self._require_valid_id(villa_id)
            if payload is None:
                raise InvalidInputError("Villa payload is required")
            if payload.id != villa_id:
                raise InvalidInputError(
                    f"Path id {villa_id} does not match body id {payload.id}", fields=["id"]
                )

            # untracked: the stored row must not be merged with the incoming values before update()
            existing = await self._find_villa(villa_id, tracked=False)

            villa = VillaMapper.to_entity(payload)
            villa.created_date = existing.created_date
            villa.updated_date = self._clock()

            updated = await self.repository.update(villa)
            await self.repository.save()

            logger.info("villa.update.success", extra={"operation": "update", "id": villa_id})
            return APIResponse.success(VillaMapper.to_dto(updated), status.HTTP_200_OK)

        return await self._respond("update", handler)

    async def delete_villa(self, villa_id: int) -> APIResponse:
        async def handler() -> APIResponse:
            self._require_valid_id(villa_id)
            villa = await self._find_villa(villa_id, tracked=True)

            await self.repository.remove(villa)
            await self.repository.save()

            logger.info("villa.delete.success", extra={"operation": "delete", "id": villa_id})
            return APIResponse.success(None, status.HTTP_200_OK)

        return await self._respond("delete", handler)
