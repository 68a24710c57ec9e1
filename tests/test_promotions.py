import pytest


def add_promotion(client, image=True, **fields):
    data = {"title": "Lunch deal", "description": "Two mains for 15", "date": "2026-11-01"}
    data.update(fields)
    files = {"image": ("deal.png", b"png-bytes", "image/png")} if image else None
    return client.post("/api/promotions", data=data, files=files)


def test_create_promotion(client, upload_dir):
    r = add_promotion(client)
    assert r.status_code == 201

    promotion = r.json()
    assert promotion["title"] == "Lunch deal"
    assert promotion["date"] == "2026-11-01"
    assert promotion["imageUrl"] == f"http://testserver/uploads/{promotion['imagePath']}"
    assert promotion["timestamp"].endswith("Z")
    assert (upload_dir / promotion["imagePath"]).exists()


@pytest.mark.parametrize("field", ["title", "description", "date"])
def test_create_promotion_missing_field(client, field):
    r = add_promotion(client, **{field: ""})

    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}
    assert client.get("/api/promotions").json() == []


def test_create_promotion_requires_image(client, upload_dir):
    r = add_promotion(client, image=False)

    assert r.status_code == 400
    assert client.get("/api/promotions").json() == []
    assert list(upload_dir.iterdir()) == []


def test_list_promotions_newest_date_first(client):
    for date in ["2026-10-01", "2026-12-01", "2026-11-15"]:
        add_promotion(client, date=date)

    dates = [p["date"] for p in client.get("/api/promotions").json()]

    assert dates == ["2026-12-01", "2026-11-15", "2026-10-01"]


def test_delete_promotion_removes_image(client, upload_dir):
    promotion = add_promotion(client).json()

    r = client.delete(f"/api/promotions/{promotion['id']}")

    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Promotion deleted"}
    assert not (upload_dir / promotion["imagePath"]).exists()
    assert client.get("/api/promotions").json() == []


def test_delete_unknown_promotion(client):
    add_promotion(client)

    r = client.delete("/api/promotions/12345")

    assert r.status_code == 404
    assert r.json() == {"error": "Promotion not found"}
    assert len(client.get("/api/promotions").json()) == 1
