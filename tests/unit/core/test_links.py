from stitchcli.core.services.links import variant_url

RECORD = {"id": "777", "links": {"Products": [{"id": "55"}, {"id": "56"}]}}

def test_variant_url():
    assert variant_url(RECORD, "acme") == "https://acme.stitchlabs.com/inventory/55/variants/777"

def test_variant_url_without_consumer():
    assert variant_url(RECORD, None) is None
    assert variant_url(RECORD, "") is None

def test_variant_url_missing_links():
    assert variant_url({"id": "777"}, "acme") is None
    assert variant_url({"id": "777", "links": {"Products": []}}, "acme") is None
    assert variant_url({"links": RECORD["links"]}, "acme") is None
