"""Cloudinary client, URL helpers and best-effort cleanup."""

import hashlib
import json
from urllib.parse import parse_qs

import httpx
import pytest

from apps.media.client import CloudinaryClient, UPLOAD_TRANSFORMATION, sign_params
from apps.media.tasks import discard_image
from apps.media.utils import is_media_url, optimized_image_url, public_id_from_url
from apps.shared.errors import UpstreamMediaError, ValidationError
from tests.conftest import FakeMedia, HOSTED_IMAGE


def make_client(handler):
    return CloudinaryClient("demo", "123456", "shh", transport=httpx.MockTransport(handler))


def form_fields(request):
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("url,expected", [
    (HOSTED_IMAGE, "portfolio/projects/old-shot"),
    ("https://res.cloudinary.com/demo/image/upload/c_limit,w_1200/sample.jpg", "sample"),
    ("https://res.cloudinary.com/demo/image/upload/sample.jpg", "sample"),
    ("https://example.com/photo.jpg", None),
    ("https://res.cloudinary.com/demo/image/upload/", None),
    ("", None),
    (None, None),
    (42, None),
])
def test_public_id_from_url(url, expected):
    assert public_id_from_url(url) == expected


@pytest.mark.parametrize("url,expected", [
    (HOSTED_IMAGE, True),
    ("/portfolio-default.jpg", False),
    ("", False),
    (None, False),
])
def test_is_media_url(url, expected):
    assert is_media_url(url) is expected


def test_optimized_image_url():
    url = optimized_image_url("demo", "portfolio/projects/shot", width=400, height=300)
    assert url == (
        "https://res.cloudinary.com/demo/image/upload/"
        "c_fill,f_auto,h_300,q_auto,w_400/portfolio/projects/shot.webp"
    )


def test_sign_params_sorts_and_appends_secret():
    params = {"timestamp": 1315060510, "public_id": "sample_image"}
    expected = hashlib.sha1(b"public_id=sample_image&timestamp=1315060510abcd").hexdigest()
    assert sign_params(params, "abcd") == expected


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_upload_sends_signed_transformed_request():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={
            "public_id": "portfolio/projects/abc",
            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/portfolio/projects/abc.webp",
            "format": "webp",
            "bytes": 2048,
        })

    result = await make_client(handler).upload(b"\x89PNG...", folder="portfolio/projects", filename="a.png")

    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert UPLOAD_TRANSFORMATION.encode() in seen["body"]
    assert b"portfolio/projects" in seen["body"]
    assert b"signature" in seen["body"]
    assert result.public_id == "portfolio/projects/abc"
    assert result.format == "webp"
    assert result.bytes == 2048


@pytest.mark.asyncio
async def test_upload_without_public_id_fails():
    client = make_client(lambda request: httpx.Response(200, json={"secure_url": "https://x"}))
    with pytest.raises(UpstreamMediaError):
        await client.upload(b"data")


@pytest.mark.asyncio
async def test_upload_rejected_by_host():
    client = make_client(lambda request: httpx.Response(400, json={"error": {"message": "Invalid image file"}}))
    with pytest.raises(UpstreamMediaError) as exc_info:
        await client.upload(b"data")
    assert "Invalid image file" in exc_info.value.message


@pytest.mark.asyncio
async def test_upload_unreadable_response():
    client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(UpstreamMediaError):
        await client.upload(b"data")


@pytest.mark.asyncio
async def test_upload_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(UpstreamMediaError):
        await make_client(handler).upload(b"data")


@pytest.mark.asyncio
async def test_unconfigured_client_fails_on_use():
    client = CloudinaryClient(None, None, None)
    assert not client.configured
    with pytest.raises(UpstreamMediaError):
        await client.upload(b"data")


# ---------------------------------------------------------------------------
# Destroy
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_destroy_signs_public_id():
    seen = {}

    def handler(request):
        seen.update(form_fields(request))
        return httpx.Response(200, json={"result": "ok"})

    result = await make_client(handler).destroy("portfolio/projects/abc")

    assert result == {"result": "ok"}
    assert seen["public_id"] == "portfolio/projects/abc"
    assert seen["api_key"] == "123456"
    expected = sign_params({"public_id": seen["public_id"], "timestamp": seen["timestamp"]}, "shh")
    assert seen["signature"] == expected


@pytest.mark.asyncio
async def test_destroy_not_ok_is_error():
    client = make_client(lambda request: httpx.Response(200, json={"result": "not found"}))
    with pytest.raises(UpstreamMediaError) as exc_info:
        await client.destroy("missing")
    assert "not found" in exc_info.value.message


@pytest.mark.asyncio
async def test_destroy_requires_public_id():
    client = make_client(lambda request: httpx.Response(200, json={"result": "ok"}))
    with pytest.raises(ValidationError):
        await client.destroy("")


@pytest.mark.asyncio
async def test_destroy_by_url():
    client = make_client(lambda request: httpx.Response(200, json={"result": "ok"}))
    public_id, result = await client.destroy_by_url(HOSTED_IMAGE)
    assert public_id == "portfolio/projects/old-shot"
    assert result["result"] == "ok"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", None, "https://example.com/nope"])
async def test_destroy_by_url_rejects_bad_urls(url):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"result": "ok"})

    with pytest.raises(ValidationError):
        await make_client(handler).destroy_by_url(url)
    assert calls == []


# ---------------------------------------------------------------------------
# Best-effort cleanup
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_discard_image_success():
    media = FakeMedia()
    assert await discard_image(media, HOSTED_IMAGE) is True
    assert media.destroyed == ["portfolio/projects/old-shot"]


@pytest.mark.asyncio
async def test_discard_image_swallows_failures():
    media = FakeMedia(fail=True)
    assert await discard_image(media, HOSTED_IMAGE) is False
    assert media.destroyed == ["portfolio/projects/old-shot"]


@pytest.mark.asyncio
@pytest.mark.parametrize("url", [None, "", "/portfolio-default.jpg", "https://res.cloudinary.com/demo/"])
async def test_discard_image_skips_non_hosted(url):
    media = FakeMedia()
    assert await discard_image(media, url) is False
    assert media.destroyed == []


@pytest.mark.asyncio
async def test_discard_image_without_relay():
    assert await discard_image(None, HOSTED_IMAGE) is False
