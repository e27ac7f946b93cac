import asyncio

import pytest

from stitchcli.core.services.pagination import Paginator, last_page_of
from stitchcli.domain.exceptions import PaginationError, TransportError
from stitchcli.domain.models.request import RequestDescriptor

BASE = RequestDescriptor(
    url="https://api-pub.stitchlabs.com/api2/v2/Products",
    headers={"access_token": "t"},
    body={"action": "read", "page_num": 1, "page_size": 2},
)

def first_page(last_page, with_options=True):
    response = {"Products": {"1": {"id": "1"}}, "meta": {"last_page": last_page}}
    if with_options:
        response["options"] = BASE.to_dict()
    return response

def test_last_page_of():
    assert last_page_of({"meta": {"last_page": "4"}}) == 4
    assert last_page_of({"meta": {}}) == 1
    assert last_page_of({}) == 1
    with pytest.raises(PaginationError):
        last_page_of({"meta": {"last_page": "many"}})

@pytest.mark.asyncio
async def test_single_page_makes_no_calls():
    calls = []

    async def request(descriptor):
        calls.append(descriptor)
        return {}

    first = first_page(1)
    result = await Paginator(request).paginate(first)
    assert result == [first]
    assert calls == []

@pytest.mark.asyncio
async def test_pages_returned_in_order_even_when_later_page_finishes_first():
    delays = {2: 0.05, 3: 0.0}

    async def request(descriptor):
        await asyncio.sleep(delays[descriptor.page_num])
        return {"Products": {str(descriptor.page_num): {}}, "page": descriptor.page_num}

    first = first_page(3)
    result = await Paginator(request).paginate(first)
    assert result[0] is first
    assert [r["page"] for r in result[1:]] == [2, 3]

@pytest.mark.asyncio
async def test_follow_up_requests_copy_the_original_options():
    seen = []

    async def request(descriptor):
        seen.append(descriptor)
        return {}

    await Paginator(request).paginate(first_page(3))
    assert [d.page_num for d in seen] == [2, 3]
    for descriptor in seen:
        assert descriptor.url == BASE.url
        assert descriptor.headers == BASE.headers
        assert descriptor.body["page_size"] == 2

@pytest.mark.asyncio
async def test_uses_descriptor_when_response_has_no_options():
    seen = []

    async def request(descriptor):
        seen.append(descriptor.page_num)
        return {}

    result = await Paginator(request).paginate(first_page(2, with_options=False), BASE)
    assert seen == [2]
    assert len(result) == 2

@pytest.mark.asyncio
async def test_missing_options_and_descriptor_raises():
    async def request(descriptor):
        return {}

    with pytest.raises(PaginationError):
        await Paginator(request).paginate(first_page(2, with_options=False))

@pytest.mark.asyncio
async def test_failure_propagates_and_cancels_remaining_pages():
    cancelled = []

    async def request(descriptor):
        if descriptor.page_num == 2:
            raise TransportError("HTTP 500", status_code=500)
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(descriptor.page_num)
            raise
        return {}

    with pytest.raises(TransportError):
        await Paginator(request).paginate(first_page(4))
    assert sorted(cancelled) == [3, 4]
