import asyncio

import httpx
import pytest

from cotacao.documents.config import DocumentSettings
from cotacao.documents.domain.exceptions import AssetFetchError
from cotacao.documents.infrastructure.logo_fetcher import HttpxLogoFetcher

LOGO_URL = "https://cdn.example.com/logo.png"

def _fetcher(handler, **settings) -> HttpxLogoFetcher:
    return HttpxLogoFetcher(DocumentSettings(**settings), transport=httpx.MockTransport(handler))

@pytest.mark.asyncio
async def test_fetch_success(png_bytes):
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == LOGO_URL
        return httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})

    logo = await _fetcher(handler).fetch(LOGO_URL)

    assert logo.content == png_bytes
    assert logo.content_type == "image/png"
    assert logo.url == LOGO_URL

@pytest.mark.asyncio
async def test_follows_a_single_redirect(png_bytes):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path == "/logo.png":
            return httpx.Response(302, headers={"location": "/assets/logo-v2.png"})
        return httpx.Response(200, content=png_bytes)

    logo = await _fetcher(handler).fetch(LOGO_URL)

    assert seen == ["/logo.png", "/assets/logo-v2.png"]
    assert logo.url == "https://cdn.example.com/assets/logo-v2.png"

@pytest.mark.asyncio
async def test_second_redirect_is_refused(png_bytes):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/final.png":
            return httpx.Response(200, content=png_bytes)
        if request.url.path == "/logo.png":
            return httpx.Response(301, headers={"location": "/hop.png"})
        return httpx.Response(301, headers={"location": "/final.png"})

    with pytest.raises(AssetFetchError, match="trop de redirections"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_redirect_without_location():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302)

    with pytest.raises(AssetFetchError, match="Location"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_timeout_raises_asset_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(AssetFetchError, match="délai"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_slow_server_is_cut_by_overall_timeout(png_bytes):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, content=png_bytes)

    with pytest.raises(AssetFetchError, match="délai"):
        await _fetcher(handler, LOGO_FETCH_TIMEOUT=0.05).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_slow_body_is_cut_by_overall_timeout():
    async def drip():
        for _ in range(100):
            await asyncio.sleep(0.05)
            yield b"x"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=drip())

    with pytest.raises(AssetFetchError, match="délai"):
        await _fetcher(handler, LOGO_FETCH_TIMEOUT=0.2).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_connection_error_raises_asset_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AssetFetchError, match="erreur réseau"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_http_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    with pytest.raises(AssetFetchError, match="404"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_empty_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    with pytest.raises(AssetFetchError, match="vide"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_non_image_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>not a logo</html>", headers={"content-type": "text/html"})

    with pytest.raises(AssetFetchError, match="image illisible"):
        await _fetcher(handler).fetch(LOGO_URL)

@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["ftp://cdn.example.com/logo.png", "data:image/png;base64,AAAA", "logo.png"])
async def test_unsupported_scheme(url):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("aucune requête attendue")

    with pytest.raises(AssetFetchError) as exc_info:
        await _fetcher(handler).fetch(url)
    assert exc_info.value.url == url

@pytest.mark.asyncio
async def test_declared_size_over_limit_is_refused():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"x" * 4096)

    with pytest.raises(AssetFetchError, match="trop volumineux \\(4096 octets"):
        await _fetcher(handler, LOGO_MAX_BYTES=1024).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_streamed_body_over_limit_is_refused():
    async def chunks():
        for _ in range(8):
            yield b"x" * 512

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=chunks())

    with pytest.raises(AssetFetchError, match="plus de 1024 octets"):
        await _fetcher(handler, LOGO_MAX_BYTES=1024).fetch(LOGO_URL)

@pytest.mark.asyncio
async def test_logo_within_limit_is_accepted(png_bytes):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=png_bytes)

    logo = await _fetcher(handler, LOGO_MAX_BYTES=len(png_bytes)).fetch(LOGO_URL)

    assert logo.content == png_bytes
