import re

import pytest

from shopadmin import UploadOptions, unique_object_name

from .conftest import KEY, URL, fail, respond

UPLOAD_PATH = "/storage/v1/object/product-images/mug.png"


@pytest.mark.asyncio
async def test_upload(client, service):
    service.route("POST", UPLOAD_PATH, respond(json_body={"Key": "product-images/mug.png"}))

    result = await client.storage.from_("product-images").upload(
        "mug.png", b"\x89PNG...", UploadOptions(cache_control=3600)
    )

    assert result.data == {"Key": "product-images/mug.png"}
    request = service.requests[0]
    assert request.headers["authorization"] == f"Bearer {KEY}"
    assert request.headers["cache-control"] == "max-age=3600"
    assert request.headers["x-upsert"] == "false"
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b"\x89PNG..." in request.content


@pytest.mark.asyncio
async def test_upload_options_as_dict(client, service):
    service.route("POST", UPLOAD_PATH, respond(json_body={"Key": "product-images/mug.png"}))
    await client.storage.from_("product-images").upload("mug.png", b"x", {"upsert": True})
    assert service.requests[0].headers["x-upsert"] == "true"


@pytest.mark.asyncio
async def test_upload_from_path(client, service, tmp_path):
    image = tmp_path / "mug.png"
    image.write_bytes(b"image-bytes")
    service.route("POST", UPLOAD_PATH, respond(json_body={"Key": "k"}))
    result = await client.storage.from_("product-images").upload("mug.png", image)
    assert result.ok
    assert b"image-bytes" in service.requests[0].content


@pytest.mark.asyncio
async def test_upload_failure_reports_status(client, service):
    service.route("POST", UPLOAD_PATH, respond(413, text="Payload too large"))
    result = await client.storage.from_("product-images").upload("mug.png", b"x")
    assert result.data is None
    assert "413" in result.error.message
    assert "Payload too large" in result.error.message
    assert result.error.message.startswith("Upload failed")


@pytest.mark.asyncio
async def test_upload_transport_failure(client, service):
    service.route("POST", UPLOAD_PATH, fail)
    result = await client.storage.from_("product-images").upload("mug.png", b"x")
    assert result.data is None
    assert result.error is not None


def test_public_url_makes_no_request(client, service):
    bucket = client.storage.from_("product-images")
    first = bucket.get_public_url("mug.png")
    second = bucket.get_public_url("mug.png")
    assert first.public_url == f"{URL}/storage/v1/object/public/product-images/mug.png"
    assert first == second
    assert first.data == {"publicUrl": first.public_url}
    assert service.requests == []


def test_unique_object_name():
    names = {unique_object_name("photo.jpg") for _ in range(50)}
    assert len(names) == 50
    for name in names:
        assert re.fullmatch(r"\d+-[0-9a-z]{12}\.jpg", name)
    assert "." not in unique_object_name("README")
