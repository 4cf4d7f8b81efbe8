import io

import pytest
from fastapi import UploadFile

from phm.core.errors import ValidationError
from phm.routers import media as media_router
from phm.services.storage import get_storage, unique_file_name

JPEG = b"\xff\xd8\xff\xe0" + b"fake-jpeg-body" * 20


def _upload(client, auth, visit, name="boiler.jpg", content=JPEG, content_type="image/jpeg", **form):
    data = {"visitSessionId": str(visit["id"]), **form}
    return client.post(
        "/api/media/upload",
        data=data,
        files={"file": (name, content, content_type)},
        headers=auth,
    )


def test_upload_and_list(client, auth, visit):
    r = _upload(client, auth, visit, caption="Boiler front")
    assert r.status_code == 201, r.text
    media = r.json()["data"]
    assert media["fileType"] == "photo"
    assert media["fileName"] == "boiler.jpg"
    assert media["fileSize"] == len(JPEG)
    assert media["mimeType"] == "image/jpeg"
    assert media["caption"] == "Boiler front"
    assert "filePath" not in media

    r = client.get(f"/api/media/{visit['id']}", headers=auth)
    assert [m["id"] for m in r.json()["data"]] == [media["id"]]


def test_download_returns_bytes(client, auth, visit):
    media = _upload(client, auth, visit).json()["data"]
    r = client.get(f"/api/media/file/{media['id']}", headers=auth)
    assert r.status_code == 200
    assert r.content == JPEG
    assert r.headers["content-type"] == "image/jpeg"
    assert r.headers["content-disposition"] == 'inline; filename="boiler.jpg"'


def test_documents_go_to_their_own_folder(client, auth, visit, db):
    from phm.models.visit import MediaAttachment

    r = _upload(
        client, auth, visit, name="gas-safe.pdf", content=b"%PDF-1.4 test", content_type="application/pdf",
        fileType="document",
    )
    assert r.status_code == 201
    row = db.get(MediaAttachment, r.json()["data"]["id"])
    assert row.file_path.startswith("documents/")
    assert row.file_path.endswith(".pdf")


def test_filename_is_sanitised(client, auth, visit):
    r = _upload(client, auth, visit, name="../../etc/pass wd?.jpg")
    assert r.status_code == 201
    assert r.json()["data"]["fileName"] == "pass wd_.jpg"


def test_missing_file_is_rejected(client, auth, visit):
    r = client.post("/api/media/upload", data={"visitSessionId": str(visit["id"])}, headers=auth)
    assert r.status_code == 400
    assert r.json()["message"] == "No file uploaded"


def test_empty_file_is_rejected(client, auth, visit):
    r = _upload(client, auth, visit, content=b"")
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "file"


def test_oversized_file_is_rejected(client, auth, visit, monkeypatch):
    from phm.core.settings import settings

    monkeypatch.setattr(settings, "MAX_UPLOAD_MB", 0)
    r = _upload(client, auth, visit)
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "file"
    assert client.get(f"/api/media/{visit['id']}", headers=auth).json()["data"] == []


@pytest.mark.anyio
async def test_upload_read_stops_once_over_the_limit(monkeypatch):
    monkeypatch.setattr(media_router, "UPLOAD_CHUNK_BYTES", 4)
    stream = io.BytesIO(b"x" * 64)
    upload = UploadFile(file=stream, filename="big.bin")

    with pytest.raises(ValidationError):
        await media_router._read_limited(upload, 10)
    # gave up after the third chunk instead of reading to the end
    assert stream.tell() == 12

    small = UploadFile(file=io.BytesIO(b"0123456789"), filename="ok.bin")
    assert await media_router._read_limited(small, 10) == b"0123456789"


def test_upload_to_foreign_visit(client, other_auth, visit):
    r = _upload(client, other_auth, visit)
    assert r.status_code == 404


def test_upload_with_module_from_another_visit(client, auth, customer, visit):
    second = client.post(
        "/api/visits", json={"customerId": customer["id"], "surveyType": "solar_pv"}, headers=auth
    ).json()["data"]
    module = client.post(
        f"/api/visits/{second['id']}/modules", json={"moduleType": "solar_pv"}, headers=auth
    ).json()["data"]
    r = _upload(client, auth, visit, moduleId=str(module["id"]))
    assert r.status_code == 404
    assert r.json()["message"] == "Module not found"


def test_annotate(client, auth, visit):
    media = _upload(client, auth, visit, caption="Old caption").json()["data"]
    r = client.post(
        f"/api/media/{media['id']}/annotate",
        json={"metadata": {"arrows": [{"x": 10, "y": 20}]}},
        headers=auth,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["metadata"] == {"arrows": [{"x": 10, "y": 20}]}
    # caption was not sent, so it stays
    assert data["caption"] == "Old caption"


def test_delete_removes_row_and_file(client, auth, visit, db):
    from phm.models.visit import MediaAttachment

    media = _upload(client, auth, visit).json()["data"]
    path = db.get(MediaAttachment, media["id"]).file_path
    assert get_storage().exists(path)

    r = client.delete(f"/api/media/{media['id']}", headers=auth)
    assert r.status_code == 200
    assert not get_storage().exists(path)
    assert client.get(f"/api/media/file/{media['id']}", headers=auth).status_code == 404


def test_media_of_other_account_is_hidden(client, auth, other_auth, visit):
    media = _upload(client, auth, visit).json()["data"]
    assert client.get(f"/api/media/file/{media['id']}", headers=other_auth).status_code == 404
    assert client.delete(f"/api/media/{media['id']}", headers=other_auth).status_code == 404


def test_shared_media_is_public(client, auth, visit):
    media = _upload(client, auth, visit).json()["data"]
    share_id = client.post(f"/api/visits/{visit['id']}/share", headers=auth).json()["data"]["shareId"]

    r = client.get(f"/api/public/view/{share_id}/media/{media['id']}")
    assert r.status_code == 200
    assert r.content == JPEG

    view = client.get(f"/api/public/view/{share_id}").json()["data"]
    assert [m["id"] for m in view["media"]] == [media["id"]]


def test_storage_refuses_paths_outside_root():
    storage = get_storage()
    # the sqlite file sits next to the upload root
    assert storage.exists("../test.db") is False
    with pytest.raises(ValueError):
        storage.read("../test.db")


def test_unique_file_name_keeps_lowercase_extension():
    name = unique_file_name("Boiler.JPG")
    assert name.endswith(".jpg")
    assert name != unique_file_name("Boiler.JPG")
