import asyncio
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from villa_api.repositories.filters import ById, ByName
from villa_api.repositories.villa_repository import VillaRepository
from villa_api.schemas.api_response import APIResponse
from villa_api.schemas.villa import VillaCreateDTO, VillaDTO, VillaUpdateDTO
from villa_api.services.villa_service import DUPLICATE_VILLA_MESSAGE, MAX_VILLA_ID, VillaService


def assert_failure(response: APIResponse, status_code: int) -> None:
    assert response.status_code == status_code
    assert response.is_success is False
    assert response.error_messages
    assert response.result is None


class TestListVillas:

    async def test_list_empty(self, villa_service):
        response = await villa_service.list_villas()

        assert response.status_code == 200
        assert response.is_success is True
        assert response.result == []

    async def test_list_returns_dtos(self, villa_service, multiple_villas):
        response = await villa_service.list_villas()

        assert response.status_code == 200
        assert all(isinstance(v, VillaDTO) for v in response.result)
        assert {v.id for v in response.result} == {v.id for v in multiple_villas}

    async def test_list_store_unavailable_keeps_driver_message(self, monkeypatch, villa_service):
        async def fake_execute(*args, **kwargs):
            raise OperationalError("SELECT ...", {}, Exception("connection refused"))

        monkeypatch.setattr(villa_service.repository.db, "execute", fake_execute)

        response = await villa_service.list_villas()

        assert_failure(response, 500)
        assert response.error_messages == ["connection refused"]

    async def test_list_unanticipated_exception_becomes_500(self, monkeypatch, villa_service):
        async def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(villa_service.repository, "get_all", boom)

        response = await villa_service.list_villas()

        assert_failure(response, 500)
        assert response.error_messages == ["boom"]


class TestGetVilla:

    @pytest.mark.parametrize("villa_id", [0, -1, None])
    async def test_invalid_id_is_rejected_without_store_access(self, monkeypatch, villa_service, villa_id):
        calls = []

        async def recording_get(*args, **kwargs):
            calls.append((args, kwargs))

        monkeypatch.setattr(villa_service.repository, "get", recording_get)

        response = await villa_service.get_villa(villa_id)

        assert_failure(response, 400)
        assert calls == []

    async def test_unknown_id_is_404(self, villa_service):
        response = await villa_service.get_villa(9999)

        assert_failure(response, 404)
        assert response.error_messages == ["Villa with ID 9999 not found"]

    async def test_id_beyond_integer_range_is_404_without_store_access(self, monkeypatch, villa_service):
        calls = []

        async def recording_get(*args, **kwargs):
            calls.append((args, kwargs))

        monkeypatch.setattr(villa_service.repository, "get", recording_get)

        response = await villa_service.get_villa(MAX_VILLA_ID + 1)

        assert_failure(response, 404)
        assert response.error_messages == [f"Villa with ID {2**63} not found"]
        assert calls == []

    async def test_largest_storable_id_is_looked_up(self, villa_service):
        response = await villa_service.get_villa(MAX_VILLA_ID)

        assert_failure(response, 404)

    async def test_existing_id(self, villa_service, created_villa):
        response = await villa_service.get_villa(created_villa.id)

        assert response.status_code == 200
        assert response.is_success is True
        assert response.result.id == created_villa.id
        assert response.result.name == created_villa.name


class TestCreateVilla:

    async def test_create_returns_201_with_assigned_id(self, villa_service, create_dto):
        """
        Behavior:
            - A create with an unused name returns 201 and the new id.
            - The stored row has created_date == updated_date.
        """
        response = await villa_service.create_villa(create_dto)

        assert response.status_code == 201
        assert response.is_success is True
        assert response.error_messages == []
        assert response.result.id > 0

        stored = await villa_service.repository.get(ById(response.result.id))
        assert stored.created_date is not None
        assert stored.created_date == stored.updated_date

    async def test_create_then_get_round_trip(self, villa_service, create_dto):
        created = await villa_service.create_villa(create_dto)

        fetched = await villa_service.get_villa(created.result.id)

        assert fetched.status_code == 200
        assert fetched.result.model_dump(exclude={"id"}) == create_dto.model_dump()

    async def test_duplicate_name_is_400_and_store_unchanged(
        self, villa_service, created_villa, sample_villa_data, count_villas
    ):
        before = await count_villas()
        dto = VillaCreateDTO(**{**sample_villa_data, "name": created_villa.name})

        response = await villa_service.create_villa(dto)

        assert_failure(response, 400)
        assert response.error_messages == [DUPLICATE_VILLA_MESSAGE]
        assert await count_villas() == before

    async def test_missing_payload_is_400(self, villa_service, count_villas):
        response = await villa_service.create_villa(None)

        assert_failure(response, 400)
        assert await count_villas() == 0

    async def test_commit_failure_is_500_with_raw_message(self, monkeypatch, villa_service, create_dto):
        async def fake_commit(*args, **kwargs):
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(villa_service.repository.db, "commit", fake_commit)

        response = await villa_service.create_villa(create_dto)

        assert_failure(response, 500)
        assert response.error_messages == ["database is locked"]

    async def test_create_timestamps_come_from_service_clock(self, villa_repository, create_dto):
        created_at = datetime(2030, 3, 4, 5, 6, 7)
        service = VillaService(villa_repository, clock=lambda: created_at)

        response = await service.create_villa(create_dto)

        assert response.status_code == 201
        stored = await villa_repository.get(ById(response.result.id))
        assert stored.created_date == created_at
        assert stored.updated_date == created_at


class TestUpdateVilla:

    def _update_dto(self, villa_id: int, data: dict, **overrides) -> VillaUpdateDTO:
        return VillaUpdateDTO(id=villa_id, **{**data, **overrides})

    async def test_path_and_body_id_mismatch_is_400(self, villa_service, created_villa, sample_villa_data):
        dto = self._update_dto(created_villa.id + 1, sample_villa_data)

        response = await villa_service.update_villa(created_villa.id, dto)

        assert_failure(response, 400)

    async def test_missing_payload_is_400(self, villa_service, created_villa):
        response = await villa_service.update_villa(created_villa.id, None)

        assert_failure(response, 400)

    async def test_invalid_id_is_400(self, villa_service, sample_villa_data):
        response = await villa_service.update_villa(0, self._update_dto(0, sample_villa_data))

        assert_failure(response, 400)

    async def test_unknown_id_is_404(self, villa_service, sample_villa_data):
        response = await villa_service.update_villa(555, self._update_dto(555, sample_villa_data))

        assert_failure(response, 404)

    async def test_id_beyond_integer_range_is_404(self, villa_service, sample_villa_data):
        villa_id = MAX_VILLA_ID + 1

        response = await villa_service.update_villa(villa_id, self._update_dto(villa_id, sample_villa_data))

        assert_failure(response, 404)

    async def test_update_keeps_created_date_and_advances_updated_date(
        self, villa_repository, created_villa, sample_villa_data
    ):
        """
        Behavior:
            - Every field is replaced from the payload.
            - created_date is carried over; updated_date comes from the service clock.
        """
        original_created = created_villa.created_date
        later = datetime(2031, 6, 1, 12, 0, 0)
        service = VillaService(villa_repository, clock=lambda: later)
        dto = self._update_dto(created_villa.id, sample_villa_data, name="Renovated Villa", details=None)

        response = await service.update_villa(created_villa.id, dto)

        assert response.status_code == 200
        assert response.result.name == "Renovated Villa"
        assert response.result.details is None

        stored = await villa_repository.get(ById(created_villa.id))
        assert stored.created_date == original_created
        assert stored.updated_date == later
        assert stored.updated_date > stored.created_date


class TestDeleteVilla:

    async def test_unknown_id_is_404(self, villa_service):
        response = await villa_service.delete_villa(31337)

        assert_failure(response, 404)

    async def test_invalid_id_is_400(self, villa_service):
        assert_failure(await villa_service.delete_villa(-5), 400)

    async def test_id_beyond_integer_range_is_404(self, villa_service, multiple_villas, count_villas):
        response = await villa_service.delete_villa(2**63)

        assert_failure(response, 404)
        assert await count_villas() == len(multiple_villas)

    async def test_delete_removes_from_list(self, villa_service, multiple_villas):
        target = multiple_villas[0]

        response = await villa_service.delete_villa(target.id)

        assert response.status_code == 200
        assert response.is_success is True
        assert response.result is None

        remaining = await villa_service.list_villas()
        assert target.id not in {v.id for v in remaining.result}
        assert len(remaining.result) == len(multiple_villas) - 1


class InterleavingVillaRepository(VillaRepository):
    """
    Forces two creates to interleave: both name checks finish before either insert.
    Writes are then serialized so a file-based SQLite store does not hit its write lock.
    """

    def __init__(self, db, barrier: asyncio.Barrier, write_lock: asyncio.Lock):
        super().__init__(db)
        self._barrier = barrier
        self._write_lock = write_lock

    async def get(self, filter, tracked=True):
        entity = await super().get(filter, tracked=tracked)
        if isinstance(filter, ByName):
            await self._barrier.wait()
        return entity

    async def create(self, entity):
        await self._write_lock.acquire()
        try:
            return await super().create(entity)
        except Exception:
            self._write_lock.release()
            raise

    async def save(self):
        try:
            await super().save()
        finally:
            if self._write_lock.locked():
                self._write_lock.release()


class TestDuplicateNameRace:

    async def test_concurrent_creates_with_same_name_both_succeed(
        self, session_factory, create_dto, count_villas
    ):
        """
        The name check and the insert are not atomic and the store has no unique
        constraint on name, so two interleaved creates both pass the check.
        """
        barrier = asyncio.Barrier(2)
        write_lock = asyncio.Lock()

        async with session_factory() as first_db, session_factory() as second_db:
            first = VillaService(InterleavingVillaRepository(first_db, barrier, write_lock))
            second = VillaService(InterleavingVillaRepository(second_db, barrier, write_lock))

            responses = await asyncio.gather(
                first.create_villa(create_dto),
                second.create_villa(create_dto),
            )

        assert [r.status_code for r in responses] == [201, 201]
        assert responses[0].result.id != responses[1].result.id
        assert await count_villas(create_dto.name) == 2
