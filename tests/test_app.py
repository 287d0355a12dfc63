from storefront.main import cors_options

def test_wildcard_origins_disable_credentials():
    options = cors_options(["*"])
    assert options["allow_origins"] == ["*"]
    assert options["allow_credentials"] is False

def test_explicit_origins_allow_credentials():
    options = cors_options(["https://shop.example.com"])
    assert options["allow_credentials"] is True

def test_preflight_with_default_origins(client):
    resp = client.options(
        "/api/products",
        headers={"Origin": "https://shop.example.com", "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "access-control-allow-credentials" not in resp.headers

def test_root_lists_service(client):
    body = client.get("/").json()
    assert body["service"] == "storefront-api"
    assert body["docs"] == "/api/docs"
