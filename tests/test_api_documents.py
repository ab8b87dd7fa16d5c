def test_document_crud(client):
    assert client.get("/documents/").json() == []
    resp = client.post("/documents/", json={"title": " Pricing guide ", "body": "Use THB."})
    assert resp.status_code == 201
    doc = resp.json()
    assert doc["title"] == "Pricing guide"

    upd = client.patch(f"/documents/{doc['id']}", json={"body": "Use THB or USD."})
    assert upd.status_code == 200
    assert upd.json()["title"] == "Pricing guide"
    assert upd.json()["body"] == "Use THB or USD."

    assert [d["id"] for d in client.get("/documents/").json()] == [doc["id"]]
    assert client.delete(f"/documents/{doc['id']}").status_code == 200
    assert client.get(f"/documents/{doc['id']}").status_code == 404
    assert client.patch(f"/documents/{doc['id']}", json={"title": "x"}).status_code == 404


def test_document_validation(client):
    assert client.post("/documents/", json={"title": "  "}).status_code == 422
    doc = client.post("/documents/", json={"title": "FAQ"}).json()
    assert doc["body"] == ""
    assert client.patch(f"/documents/{doc['id']}", json={}).status_code == 422
