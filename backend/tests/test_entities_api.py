"""Shipper / consignee / overseas agent endpoint tests."""

import pytest
import pytest_asyncio
from sqlalchemy import select

from freightdesk.config import settings
from freightdesk.models.activity_log import ActivityLog
from freightdesk.models.entity import Entity, EntityType
from freightdesk.utils.storage import DocumentTooLargeError, read_upload


@pytest_asyncio.fixture
async def acme(db_session) -> Entity:
    entity = Entity(entity_type=EntityType.SHIPPERS, name="Acme Exports", phone="+91 44 1234 5678")
    db_session.add(entity)
    await db_session.commit()
    return entity


@pytest.mark.api
@pytest.mark.asyncio
class TestEntityCrud:

    async def test_create(self, client, superadmin_headers):
        response = await client.post("/api/entities/shippers/", headers=superadmin_headers, json={
            "name": "  Acme Exports ",
            "email": "ops@acme.test",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Acme Exports"
        assert data["entity_type"] == "shippers"
        assert data["document_url"] is None

    async def test_list_sorted_by_name(self, client, db_session, rm_headers):
        for name in ("Zeta Freight", "Acme Exports", "Mira Logistics"):
            db_session.add(Entity(entity_type=EntityType.CONSIGNEES, name=name))
        db_session.add(Entity(entity_type=EntityType.SHIPPERS, name="Other Type"))
        await db_session.commit()

        response = await client.get("/api/entities/consignees/", headers=rm_headers)

        assert response.status_code == 200
        assert [e["name"] for e in response.json()] == ["Acme Exports", "Mira Logistics", "Zeta Freight"]

    async def test_duplicate_name_rejected(self, client, superadmin_headers, acme):
        response = await client.post("/api/entities/shippers/", headers=superadmin_headers, json={
            "name": "Acme Exports",
        })

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "DUPLICATE_NAME"
        assert error["message"] == "Shipper with this name already exists. Please choose a different name."

    async def test_same_name_allowed_in_other_type(self, client, superadmin_headers, acme):
        response = await client.post("/api/entities/consignees/", headers=superadmin_headers, json={
            "name": "Acme Exports",
        })
        assert response.status_code == 201

    async def test_names_are_case_sensitive(self, client, superadmin_headers, acme):
        response = await client.post("/api/entities/shippers/", headers=superadmin_headers, json={
            "name": "ACME EXPORTS",
        })
        assert response.status_code == 201

    async def test_blank_name_rejected(self, client, superadmin_headers):
        response = await client.post("/api/entities/shippers/", headers=superadmin_headers, json={"name": "   "})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_entity_type(self, client, superadmin_headers):
        response = await client.get("/api/entities/carriers/", headers=superadmin_headers)
        assert response.status_code == 422

    async def test_update(self, client, superadmin_headers, acme):
        response = await client.patch(f"/api/entities/shippers/{acme.id}", headers=superadmin_headers, json={
            "phone": "+91 44 0000 0000",
        })

        assert response.status_code == 200
        assert response.json()["phone"] == "+91 44 0000 0000"
        assert response.json()["name"] == "Acme Exports"

    async def test_update_to_taken_name(self, client, db_session, superadmin_headers, acme):
        other = Entity(entity_type=EntityType.SHIPPERS, name="Beta Traders")
        db_session.add(other)
        await db_session.commit()

        response = await client.patch(f"/api/entities/shippers/{other.id}", headers=superadmin_headers, json={
            "name": "Acme Exports",
        })

        assert response.status_code == 409

    async def test_update_keeping_own_name(self, client, superadmin_headers, acme):
        response = await client.patch(f"/api/entities/shippers/{acme.id}", headers=superadmin_headers, json={
            "name": "Acme Exports",
            "email": "new@acme.test",
        })
        assert response.status_code == 200

    async def test_wrong_type_in_path_is_not_found(self, client, superadmin_headers, acme):
        response = await client.patch(f"/api/entities/consignees/{acme.id}", headers=superadmin_headers, json={
            "phone": "1",
        })

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_delete(self, client, db_session, superadmin_headers, acme):
        response = await client.delete(f"/api/entities/shippers/{acme.id}", headers=superadmin_headers)

        assert response.status_code == 204
        remaining = (await db_session.execute(select(Entity.id))).scalars().all()
        assert remaining == []

        log = (await db_session.execute(select(ActivityLog))).scalars().one()
        assert log.action == "deleted"
        assert log.entity_code == "Acme Exports"

    async def test_rm_cannot_write_by_default(self, client, rm_headers):
        response = await client.post("/api/entities/shippers/", headers=rm_headers, json={"name": "X"})
        assert response.status_code == 403


@pytest.mark.api
@pytest.mark.asyncio
class TestEntityDocuments:

    async def _upload(self, client, headers, entity_id, filename="kyc.pdf", content=b"%PDF-1.4 test"):
        return await client.post(
            f"/api/entities/shippers/{entity_id}/document",
            headers=headers,
            files={"file": (filename, content, "application/pdf")},
        )

    async def test_upload(self, client, superadmin_headers, document_store, acme):
        response = await self._upload(client, superadmin_headers, acme.id)

        assert response.status_code == 200
        data = response.json()
        assert data["document_name"] == "kyc.pdf"
        assert data["document_url"].startswith("/files/shippers-")
        assert data["document_url"].endswith(".pdf")

        stored = document_store.root / data["document_url"].rsplit("/", 1)[1]
        assert stored.read_bytes() == b"%PDF-1.4 test"

    async def test_replace_removes_previous_file(self, client, superadmin_headers, document_store, acme):
        first = (await self._upload(client, superadmin_headers, acme.id)).json()["document_url"]
        second = (await self._upload(client, superadmin_headers, acme.id, "kyc-v2.pdf")).json()["document_url"]

        assert first != second
        assert [p.name for p in document_store.root.iterdir()] == [second.rsplit("/", 1)[1]]

    async def test_delete_removes_document(self, client, superadmin_headers, document_store, acme):
        await self._upload(client, superadmin_headers, acme.id)

        response = await client.delete(f"/api/entities/shippers/{acme.id}", headers=superadmin_headers)

        assert response.status_code == 204
        assert list(document_store.root.iterdir()) == []

    async def test_too_large(self, client, superadmin_headers, acme, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 4)

        response = await self._upload(client, superadmin_headers, acme.id)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DOCUMENT_TOO_LARGE"

    async def test_upload_to_missing_entity(self, client, superadmin_headers):
        response = await self._upload(client, superadmin_headers, "missing")
        assert response.status_code == 404


@pytest.mark.unit
@pytest.mark.asyncio
class TestDocumentStore:

    async def test_delete_ignores_foreign_urls(self, document_store):
        assert await document_store.delete("https://elsewhere.test/file.pdf") is False
        assert await document_store.delete("") is False

    async def test_delete_missing_file(self, document_store):
        assert await document_store.delete("/files/shippers-gone.pdf") is False

    async def test_path_traversal_stays_in_root(self, document_store, tmp_path):
        outside = tmp_path / "secret.txt"
        outside.write_text("keep me")

        assert await document_store.delete("/files/../secret.txt") is False
        assert outside.exists()


class ChunkedUpload:
    """Async reader that records how much was pulled from it."""

    def __init__(self, total: int, size: int | None = None):
        self.remaining = total
        self.size = size
        self.bytes_read = 0

    async def read(self, n: int = -1) -> bytes:
        n = self.remaining if n < 0 else min(n, self.remaining)
        self.remaining -= n
        self.bytes_read += n
        return b"x" * n


@pytest.mark.unit
@pytest.mark.asyncio
class TestReadUpload:

    async def test_reads_everything_under_the_cap(self, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 200_000)
        assert len(await read_upload(ChunkedUpload(150_000))) == 150_000

    async def test_stops_once_over_the_cap(self, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 100_000)
        upload = ChunkedUpload(10 * 1024 * 1024)

        with pytest.raises(DocumentTooLargeError):
            await read_upload(upload)
        assert upload.bytes_read < 200_000

    async def test_declared_size_is_checked_first(self, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 100)
        upload = ChunkedUpload(50, size=5000)

        with pytest.raises(DocumentTooLargeError):
            await read_upload(upload)
        assert upload.bytes_read == 0
