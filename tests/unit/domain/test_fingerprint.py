from stitchcli.domain.fingerprint import canonical_json, fingerprint
from stitchcli.domain.models.common import RequestUrl
from stitchcli.domain.models.request import RequestDescriptor

URL = RequestUrl("https://api-pub.stitchlabs.com/api2/v2/Products")

def make_descriptor(**overrides) -> RequestDescriptor:
    data = {
        "url": URL,
        "method": "POST",
        "headers": {"access_token": "token", "Content-Type": "application/json;charset=UTF-8"},
        "body": {"action": "read", "page_num": 1, "page_size": 5},
        "return_options": True,
    }
    data.update(overrides)
    return RequestDescriptor.from_dict(data)

def test_fingerprint_is_md5_hex():
    value = fingerprint(make_descriptor())
    assert len(value) == 32
    assert all(c in "0123456789abcdef" for c in value)

def test_fingerprint_is_stable():
    assert fingerprint(make_descriptor()) == fingerprint(make_descriptor())

def test_fingerprint_ignores_key_order():
    a = make_descriptor(body={"action": "read", "page_num": 1, "page_size": 5})
    b = make_descriptor(body={"page_size": 5, "page_num": 1, "action": "read"})
    assert fingerprint(a) == fingerprint(b)

def test_fingerprint_ignores_return_options():
    assert fingerprint(make_descriptor(return_options=True)) == fingerprint(make_descriptor(return_options=False))
    assert "return_options" not in canonical_json(make_descriptor())

def test_fingerprint_changes_with_page():
    descriptor = make_descriptor()
    assert fingerprint(descriptor) != fingerprint(descriptor.with_page(2))

def test_fingerprint_changes_with_token():
    other = make_descriptor(headers={"access_token": "other", "Content-Type": "application/json;charset=UTF-8"})
    assert fingerprint(make_descriptor()) != fingerprint(other)
