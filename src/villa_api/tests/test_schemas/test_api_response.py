import pytest
from pydantic import ValidationError

from villa_api.schemas.api_response import APIResponse
from villa_api.schemas.villa import VillaCreateDTO, VillaDTO, VillaUpdateDTO


class TestAPIResponse:

    def test_success_defaults(self):
        response = APIResponse.success({"id": 1}, 201)

        assert response.status_code == 201
        assert response.is_success is True
        assert response.error_messages == []
        assert response.result == {"id": 1}

    def test_success_without_result(self):
        response = APIResponse.success()

        assert response.status_code == 200
        assert response.result is None

    def test_failure_keeps_messages_in_order(self):
        response = APIResponse.failure(400, "first", "second")

        assert response.is_success is False
        assert response.error_messages == ["first", "second"]
        assert response.result is None

    def test_failure_without_message_is_rejected(self):
        with pytest.raises(ValidationError):
            APIResponse.failure(500)

    def test_success_with_messages_is_rejected(self):
        with pytest.raises(ValidationError):
            APIResponse(status_code=200, is_success=True, error_messages=["oops"])

    def test_content_uses_camel_case(self):
        content = APIResponse.failure(404, "Villa with ID 7 not found").to_content()

        assert content == {
            "statusCode": 404,
            "isSuccess": False,
            "errorMessages": ["Villa with ID 7 not found"],
            "result": None,
        }

    def test_content_serializes_dto_result(self):
        dto = VillaDTO(id=3, name="Pool Villa", rate=200.0, image_url="https://img/3.png")

        content = APIResponse.success(dto).to_content()

        assert content["result"]["id"] == 3
        assert content["result"]["imageUrl"] == "https://img/3.png"
        assert "image_url" not in content["result"]

    def test_instances_do_not_share_message_lists(self):
        first = APIResponse.success()
        second = APIResponse.success()

        assert first.error_messages is not second.error_messages


class TestVillaDTOs:

    def test_accepts_camel_case_and_snake_case(self):
        camel = VillaCreateDTO.model_validate({"name": "A", "rate": 1.5, "imageUrl": "x"})
        snake = VillaCreateDTO(name="A", rate=1.5, image_url="x")

        assert camel == snake

    def test_create_defaults(self):
        dto = VillaCreateDTO(name="Beach Villa", rate=120.0)

        assert dto.sqft == 0
        assert dto.occupancy == 0
        assert dto.details is None
        assert dto.amenity is None

    @pytest.mark.parametrize("missing", ["name", "rate"])
    def test_create_requires_name_and_rate(self, missing):
        data = {"name": "Beach Villa", "rate": 120.0}
        data.pop(missing)

        with pytest.raises(ValidationError):
            VillaCreateDTO(**data)

    def test_update_requires_id(self):
        with pytest.raises(ValidationError):
            VillaUpdateDTO(name="Beach Villa", rate=120.0)

    def test_no_length_or_range_rules(self):
        dto = VillaCreateDTO(name="", rate=-1.0, sqft=-10, occupancy=0)

        assert dto.name == ""
        assert dto.rate == -1.0
