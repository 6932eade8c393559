import base64

import pytest

UNKNOWN_GUID = "00000000-0000-0000-0000-000000000000"


async def _create(client, **fields):
    response = await client.post("/escolas/", json={"escola": fields})
    assert response.status_code == 201, response.text
    return response.json()["data"]["escola"]


@pytest.mark.asyncio
class TestCreateEndpoint:

    async def test_create_returns_201_with_envelope(self, client):
        response = await client.post(
            "/escolas/", json={"escola": {"EscolaNome": "Colégio Azul", "EscolaCorPriEs": "1A2B3C"}}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"]
        escola = body["data"]["escola"]
        assert len(escola["EscolaGUID"]) == 36
        assert escola["EscolaNome"] == "Colégio Azul"
        assert escola["EscolaCorPriEs"] == "1A2B3C"
        assert escola["EscolaIcone"] is None

    async def test_duplicate_name_is_409(self, client):
        await _create(client, EscolaNome="Colégio Azul")

        response = await client.post("/escolas/", json={"escola": {"EscolaNome": "Colégio Azul"}})

        assert response.status_code == 409
        assert response.json()["code"] == "duplicate"
        assert response.json()["fields"] == ["EscolaNome"]

    async def test_missing_escola_object_is_422(self, client):
        response = await client.post("/escolas/", json={"EscolaNome": "Colégio Azul"})

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "invalid_input"
        assert body["fields"] == ["escola"]

    @pytest.mark.parametrize("nome", [None, ""])
    async def test_name_is_required_on_create(self, client, nome):
        response = await client.post("/escolas/", json={"escola": {"EscolaNome": nome}})

        assert response.status_code == 422
        assert response.json()["fields"] == ["EscolaNome"]

    async def test_non_string_field_is_422(self, client):
        response = await client.post(
            "/escolas/", json={"escola": {"EscolaNome": "Escola Azul", "EscolaCorPriEs": 123456}}
        )

        assert response.status_code == 422
        assert response.json()["fields"] == ["EscolaCorPriEs"]

    async def test_entity_rule_violation_is_422(self, client):
        response = await client.post(
            "/escolas/", json={"escola": {"EscolaNome": "Escola Azul", "EscolaCorSecCl": "#FFFFFF"}}
        )

        assert response.status_code == 422
        assert response.json() == {
            "detail": "EscolaCorSecCl must be a 6-digit HEX color",
            "code": "invalid_input",
            "fields": ["EscolaCorSecCl"],
        }

    async def test_unknown_keys_are_ignored(self, client):
        escola = await _create(client, EscolaNome="Escola Azul", Apelido="EA")
        assert "Apelido" not in escola

    async def test_icon_round_trips_as_base64(self, client):
        icon = base64.b64encode(b"\x00\x01binary\xff").decode("ascii")

        created = await _create(client, EscolaNome="Escola Azul", EscolaIcone=icon)
        fetched = await client.get(f"/escolas/{created['EscolaGUID']}")

        assert created["EscolaIcone"] == icon
        assert fetched.json()["data"]["EscolaIcone"] == icon


@pytest.mark.asyncio
class TestReadEndpoints:

    async def test_list_returns_every_school(self, client):
        await _create(client, EscolaNome="Colégio Azul")
        await _create(client, EscolaNome="Escola Verde")

        response = await client.get("/escolas/")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert sorted(e["EscolaNome"] for e in body["data"]["escolas"]) == ["Colégio Azul", "Escola Verde"]

    async def test_list_filters_by_name(self, client):
        await _create(client, EscolaNome="Colégio Azul")
        await _create(client, EscolaNome="Escola Verde")

        response = await client.get("/escolas/", params={"nome": "Azul"})

        assert [e["EscolaNome"] for e in response.json()["data"]["escolas"]] == ["Colégio Azul"]

    async def test_list_empty(self, client):
        response = await client.get("/escolas/")
        assert response.json()["data"] == {"escolas": []}

    async def test_show_returns_the_dto_directly_under_data(self, client):
        created = await _create(client, EscolaNome="Escola Azul")

        response = await client.get(f"/escolas/{created['EscolaGUID']}")

        assert response.status_code == 200
        assert response.json()["data"] == created

    async def test_show_unknown_is_404(self, client):
        response = await client.get(f"/escolas/{UNKNOWN_GUID}")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        assert UNKNOWN_GUID in response.json()["detail"]


@pytest.mark.asyncio
class TestUpdateEndpoint:

    async def test_update_merges_by_key_presence(self, client):
        created = await _create(client, EscolaNome="Colégio Azul", EscolaCorPriEs="1A2B3C")

        response = await client.put(
            f"/escolas/{created['EscolaGUID']}", json={"escola": {"EscolaNome": None}}
        )

        assert response.status_code == 200
        escola = response.json()["data"]["escola"]
        assert escola["EscolaNome"] is None
        assert escola["EscolaCorPriEs"] == "1A2B3C"

    async def test_empty_update_keeps_everything(self, client):
        created = await _create(client, EscolaNome="Colégio Azul", EscolaCorPriEs="1A2B3C")

        response = await client.put(f"/escolas/{created['EscolaGUID']}", json={"escola": {}})

        assert response.json()["data"]["escola"] == created

    async def test_update_unknown_is_404(self, client):
        response = await client.put(f"/escolas/{UNKNOWN_GUID}", json={"escola": {"EscolaNome": "Escola Nova"}})
        assert response.status_code == 404

    async def test_update_to_existing_name_is_409(self, client):
        await _create(client, EscolaNome="Escola Azul")
        other = await _create(client, EscolaNome="Escola Verde")

        response = await client.put(
            f"/escolas/{other['EscolaGUID']}", json={"escola": {"EscolaNome": "Escola Azul"}}
        )

        assert response.status_code == 409

    async def test_update_without_escola_object_is_422(self, client):
        created = await _create(client, EscolaNome="Escola Azul")
        response = await client.put(f"/escolas/{created['EscolaGUID']}", json={})
        assert response.status_code == 422


@pytest.mark.asyncio
class TestDeleteEndpoint:

    async def test_delete_existing_is_204_without_body(self, client):
        created = await _create(client, EscolaNome="Escola Azul")

        response = await client.delete(f"/escolas/{created['EscolaGUID']}")

        assert response.status_code == 204
        assert response.content == b""
        assert (await client.get(f"/escolas/{created['EscolaGUID']}")).status_code == 404

    async def test_delete_unknown_is_structured_404(self, client):
        response = await client.delete(f"/escolas/{UNKNOWN_GUID}")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "not_found"
        assert body["fields"] == ["EscolaGUID"]


@pytest.mark.asyncio
class TestRequestId:

    async def test_request_id_is_generated_and_echoed(self, client):
        response = await client.get("/escolas/")
        assert len(response.headers["X-Request-ID"]) == 36

    async def test_incoming_request_id_is_reused(self, client):
        response = await client.get("/escolas/", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_unsafe_request_id_is_replaced(self, client):
        response = await client.get("/escolas/", headers={"X-Request-ID": "bad id with spaces"})
        assert response.headers["X-Request-ID"] != "bad id with spaces"
