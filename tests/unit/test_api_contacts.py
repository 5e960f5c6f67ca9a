"""Tests for the Contacts API and primary-contact enforcement."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.models import Application, Contact
from jobtrail.services.contact_service import set_primary_contact
from tests.conftest import create_application

_BASE_URL = "/api/v1/contacts"


async def _create_contact(client: AsyncClient, application_id: str, **fields) -> dict:
    payload = {"application_id": application_id, "name": "Dana", **fields}
    response = await client.post(_BASE_URL, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestContactsApi:
    @pytest.mark.asyncio
    async def test_list_requires_application_id(self, client: AsyncClient):
        response = await client.get(_BASE_URL)

        assert response.status_code == 400
        assert response.json()["error"] == "application_id is required"

    @pytest.mark.asyncio
    async def test_create_and_list(self, client: AsyncClient):
        app = await create_application(client)
        contact = await _create_contact(
            client, app["id"], email="dana@acme.test", phone=""
        )

        response = await client.get(_BASE_URL, params={"application_id": app["id"]})

        assert contact["email"] == "dana@acme.test"
        assert contact["phone"] is None
        assert [c["id"] for c in response.json()["data"]] == [contact["id"]]

    @pytest.mark.asyncio
    async def test_name_is_required(self, client: AsyncClient):
        app = await create_application(client)

        response = await client.post(_BASE_URL, json={"application_id": app["id"]})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_for_missing_application(self, client: AsyncClient):
        response = await client.post(
            _BASE_URL, json={"application_id": "missing", "name": "Dana"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_only_one_primary_contact(self, client: AsyncClient):
        app = await create_application(client)
        first = await _create_contact(client, app["id"], name="First", is_primary=True)
        second = await _create_contact(client, app["id"], name="Second", is_primary=True)

        listing = await client.get(_BASE_URL, params={"application_id": app["id"]})

        primary = {c["id"]: c["is_primary"] for c in listing.json()["data"]}
        assert primary == {first["id"]: False, second["id"]: True}
        assert second["is_primary"] is True

    @pytest.mark.asyncio
    async def test_update_switches_primary(self, client: AsyncClient):
        app = await create_application(client)
        first = await _create_contact(client, app["id"], name="First", is_primary=True)
        second = await _create_contact(client, app["id"], name="Second")

        response = await client.put(
            f"{_BASE_URL}/{second['id']}", json={"is_primary": True, "phone": "555"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["is_primary"] is True
        assert response.json()["data"]["phone"] == "555"
        listing = await client.get(_BASE_URL, params={"application_id": app["id"]})
        primary = {c["id"]: c["is_primary"] for c in listing.json()["data"]}
        assert primary == {first["id"]: False, second["id"]: True}

    @pytest.mark.asyncio
    async def test_update_missing_contact(self, client: AsyncClient):
        response = await client.put(f"{_BASE_URL}/missing", json={"name": "X"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_contact(self, client: AsyncClient):
        app = await create_application(client)
        contact = await _create_contact(client, app["id"])

        response = await client.delete(f"{_BASE_URL}/{contact['id']}")
        again = await client.delete(f"{_BASE_URL}/{contact['id']}")

        assert response.status_code == 200
        assert again.status_code == 404


class TestSetPrimaryContact:
    @pytest.mark.asyncio
    async def test_other_applications_are_untouched(self, db_session: AsyncSession):
        one = Application(company="One", position="Dev")
        two = Application(company="Two", position="Dev")
        db_session.add_all([one, two])
        await db_session.flush()
        a = Contact(application_id=one.id, name="A", is_primary=True)
        b = Contact(application_id=one.id, name="B")
        c = Contact(application_id=two.id, name="C", is_primary=True)
        db_session.add_all([a, b, c])
        await db_session.commit()

        await set_primary_contact(db_session, one.id, b.id)
        await db_session.commit()

        # Bulk UPDATE does not refresh loaded objects; reload them
        for contact in (a, b, c):
            await db_session.refresh(contact)
        flags = {contact.name: contact.is_primary for contact in (a, b, c)}
        assert flags == {"A": False, "B": True, "C": True}
