import json
from pathlib import Path

import pytest

from stitchcli.core.client import StitchLabsClient
from stitchcli.domain.exceptions import ConfigError, NoCacheConfigured

def make_client(transport, **kwargs):
    options = dict(access_token="secret", requests_per_second=10, spacing_seconds=0.01, transport=transport)
    options.update(kwargs)
    return StitchLabsClient(**options)

def test_missing_access_token_raises():
    with pytest.raises(ConfigError, match="missing accessToken"):
        StitchLabsClient(access_token=None)
    with pytest.raises(ConfigError):
        StitchLabsClient(access_token="")

def test_cache_override_requires_cache_dir(make_transport, fake_api):
    client = make_client(make_transport(fake_api), cache_override=True)
    assert client.cache_override is False

def test_build_options_uses_page_size(make_transport, fake_api):
    client = make_client(make_transport(fake_api), page_size=50)
    descriptor = client.build_options("api2/v2/Products")
    assert descriptor.body["page_size"] == 50
    assert descriptor.headers["access_token"] == "secret"

@pytest.mark.asyncio
async def test_request_decorates_response_with_options(make_transport, fake_api):
    async with make_client(make_transport(fake_api)) as client:
        response = await client.request("api2/v2/Products")
    assert response["meta"] == {"last_page": 3}
    assert response["options"]["url"] == "https://api-pub.stitchlabs.com/api2/v2/Products"
    assert response["options"]["body"]["page_num"] == 1

@pytest.mark.asyncio
async def test_request_all_merges_every_page(make_transport, fake_api):
    async with make_client(make_transport(fake_api), page_size=2) as client:
        merged = await client.request_all("api2/v2/Products")

    assert list(merged) == ["Products"]
    assert [p["id"] for p in merged["Products"]] == ["11", "12", "21", "22", "31", "32"]
    assert sorted(body["page_num"] for body in fake_api.bodies) == [1, 2, 3]
    assert all(r.url.host == "api-pub.stitchlabs.com" for r in fake_api.requests)
    assert all(r.headers["access_token"] == "secret" for r in fake_api.requests)

@pytest.mark.asyncio
async def test_paginate_then_merge(make_transport, fake_api):
    async with make_client(make_transport(fake_api)) as client:
        first = await client.request("api2/v2/Products")
        pages = await client.paginate(first)
        merged = client.merge_responses(pages)
    assert len(pages) == 3
    assert len(merged["Products"]) == 6

@pytest.mark.asyncio
async def test_cache_override_serves_repeat_requests_from_disk(make_transport, fake_api, cache_dir: Path):
    client = make_client(make_transport(fake_api), cache_dir=cache_dir, cache_alive=3600, cache_override=True)
    async with client:
        first = await client.request("api2/v2/Products")
        second = await client.request("api2/v2/Products")

    assert len(fake_api.requests) == 1
    assert second == first
    artifacts = list(cache_dir.glob("*.json"))
    assert len(artifacts) == 1
    assert json.loads(artifacts[0].read_text(encoding="utf-8")) == first

@pytest.mark.asyncio
async def test_make_request_bypasses_cache(make_transport, fake_api, cache_dir: Path):
    client = make_client(make_transport(fake_api), cache_dir=cache_dir, cache_alive=3600, cache_override=True)
    async with client:
        await client.make_request("api2/v2/Products")
        await client.make_request("api2/v2/Products")
    assert len(fake_api.requests) == 2
    assert list(cache_dir.iterdir()) == []

@pytest.mark.asyncio
async def test_cache_request_works_without_override(make_transport, fake_api, cache_dir: Path):
    client = make_client(make_transport(fake_api), cache_dir=cache_dir, cache_alive=3600)
    async with client:
        await client.cache_request("api2/v2/Products")
        await client.cache_request("api2/v2/Products")
    assert len(fake_api.requests) == 1

@pytest.mark.asyncio
async def test_cache_request_without_cache_dir_raises(make_transport, fake_api):
    async with make_client(make_transport(fake_api)) as client:
        with pytest.raises(NoCacheConfigured):
            await client.cache_request("api2/v2/Products")
    assert fake_api.requests == []

def test_variant_url_uses_consumer_url(make_transport, fake_api):
    client = make_client(make_transport(fake_api), consumer_url="acme")
    record = {"id": "9", "links": {"Products": [{"id": "4"}]}}
    assert client.variant_url(record) == "https://acme.stitchlabs.com/inventory/4/variants/9"
