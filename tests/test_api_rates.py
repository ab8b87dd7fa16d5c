import pytest


def _rates_by_pair(client):
    return {
        (r["from_currency"], r["to_currency"]): r for r in client.get("/exchange-rates/").json()
    }


def test_seeded_usd_rates(client):
    pairs = _rates_by_pair(client)
    assert set(pairs) == {("USD", "EUR"), ("USD", "GBP"), ("USD", "JPY"), ("USD", "THB")}
    assert pairs[("USD", "THB")]["rate"] == 36.5


def test_add_update_delete_rate(client):
    resp = client.post(
        "/exchange-rates/", json={"from_currency": "eur", "to_currency": "gbp", "rate": 0.86}
    )
    assert resp.status_code == 201
    rate = resp.json()
    assert (rate["from_currency"], rate["to_currency"]) == ("EUR", "GBP")

    upd = client.put(f"/exchange-rates/{rate['id']}", json={"rate": 0.87})
    assert upd.status_code == 200
    assert upd.json()["rate"] == 0.87

    assert client.delete(f"/exchange-rates/{rate['id']}").status_code == 200
    assert client.delete(f"/exchange-rates/{rate['id']}").status_code == 404
    assert client.put(f"/exchange-rates/{rate['id']}", json={"rate": 1}).status_code == 404


def test_rate_validation(client):
    dup = {"from_currency": "USD", "to_currency": "THB", "rate": 35}
    assert client.post("/exchange-rates/", json=dup).status_code == 409
    unknown = {"from_currency": "USD", "to_currency": "VND", "rate": 25000}
    assert client.post("/exchange-rates/", json=unknown).status_code == 400
    same = {"from_currency": "THB", "to_currency": "THB", "rate": 1}
    assert client.post("/exchange-rates/", json=same).status_code == 422
    zero = {"from_currency": "EUR", "to_currency": "JPY", "rate": 0}
    assert client.post("/exchange-rates/", json=zero).status_code == 422


def test_markup(client):
    assert client.get("/exchange-rates/markup").json() == {"markup_percentage": 0.0}
    resp = client.put("/exchange-rates/markup", json={"markup_percentage": 2.5})
    assert resp.json() == {"markup_percentage": 2.5}
    assert client.put("/exchange-rates/markup", json={"markup_percentage": -1}).status_code == 422


def test_convert(client):
    body = {"amount": 100, "from_currency": "USD", "to_currency": "THB"}
    result = client.post("/exchange-rates/convert", json=body).json()
    assert result["converted_amount"] == 3650.0
    assert result["base_rate"] == 36.5
    assert result["markup_applied"] == 0.0

    client.put("/exchange-rates/markup", json={"markup_percentage": 10})
    result = client.post("/exchange-rates/convert", json=body).json()
    assert result["final_rate"] == pytest.approx(40.15)
    assert result["converted_amount"] == 4015.0
    assert result["markup_applied"] == 10


def test_convert_errors(client):
    unknown = {"amount": 1, "from_currency": "USD", "to_currency": "VND"}
    assert client.post("/exchange-rates/convert", json=unknown).status_code == 400

    client.post("/currencies/", json={"code": "VND"})
    missing = client.post("/exchange-rates/convert", json=unknown)
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"


def test_refresh_from_static_provider(client):
    client.post("/currencies/", json={"code": "VND"})
    resp = client.post("/exchange-rates/refresh")
    assert resp.status_code == 200
    body = resp.json()
    assert body["provider"] == "static"
    # EUR, GBP, JPY, THB and the custom VND are quoted by the static table
    assert body["updated_pairs"] == 5
    assert _rates_by_pair(client)[("USD", "VND")]["rate"] == 25000.0
    assert client.get("/exchange-rates/provider").json()["rates_fetched_at"] is not None


def test_provider_override(client):
    assert client.put("/exchange-rates/provider", json={"provider": "bogus"}).status_code == 400
    resp = client.put("/exchange-rates/provider", json={"provider": "external-http"})
    assert resp.status_code == 200
    assert resp.json()["provider"] == "external-http"
    assert resp.json()["configured_default"] == "static"

    # Without an API key the external provider degrades to the static table.
    refresh = client.post("/exchange-rates/refresh").json()
    assert refresh["provider"] == "external-http"
    assert refresh["updated_pairs"] == 4
