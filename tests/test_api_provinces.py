def test_default_provinces_seeded(client):
    names = [p["name"] for p in client.get("/provinces/").json()]
    assert len(names) == 10
    assert "Bangkok" in names
    assert names == sorted(names, key=str.lower)


def test_create_get_update_delete(client):
    resp = client.post("/provinces/", json={"name": "  Nan ", "country": "Thailand"})
    assert resp.status_code == 201
    province = resp.json()
    assert province["name"] == "Nan"
    assert province["country"] == "Thailand"

    assert client.get(f"/provinces/{province['id']}").json()["name"] == "Nan"

    upd = client.put(f"/provinces/{province['id']}", json={"name": "Nan Province"})
    assert upd.status_code == 200
    assert upd.json() == {"id": province["id"], "name": "Nan Province", "country": None}

    assert client.delete(f"/provinces/{province['id']}").status_code == 200
    assert client.get(f"/provinces/{province['id']}").status_code == 404
    assert client.delete(f"/provinces/{province['id']}").status_code == 404
    assert client.put(f"/provinces/{province['id']}", json={"name": "X"}).status_code == 404


def test_duplicate_names_conflict(client):
    assert client.post("/provinces/", json={"name": "bangkok"}).status_code == 409
    other = client.post("/provinces/", json={"name": "Nan"}).json()
    assert client.put(f"/provinces/{other['id']}", json={"name": "Krabi"}).status_code == 409


def test_blank_name_rejected(client):
    assert client.post("/provinces/", json={"name": "   "}).status_code == 422


def test_rename_carries_into_prices_and_blocks_delete(client):
    province = client.post("/provinces/", json={"name": "Hua Hin"}).json()
    price = client.post(
        "/service-prices/",
        json={"name": "Night Market Dinner", "province": "Hua Hin", "category": "meal",
              "price1": 300, "currency": "THB"},
    ).json()

    assert client.delete(f"/provinces/{province['id']}").status_code == 409

    client.put(f"/provinces/{province['id']}", json={"name": "Prachuap Khiri Khan"})
    moved = client.get(f"/service-prices/{price['id']}").json()
    assert moved["province"] == "Prachuap Khiri Khan"
    listed = client.get("/service-prices/", params={"province": "prachuap khiri khan"}).json()
    assert [p["id"] for p in listed] == [price["id"]]
