"""
Category endpoints.
"""
import pytest

from conftest import make_png

pytestmark = pytest.mark.anyio


async def test_add_category(client, auth_headers):
    response = await client.post(
        "/api/categories",
        json={"name": "  çorbalar ", "displayNames": {"tr": "Çorbalar", "en": "Soups"}},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "category": "çorbalar"}
    document = (await client.get("/api/menu-items")).json()
    assert document["çorbalar"] == {"items": [], "displayNames": {"tr": "Çorbalar", "en": "Soups"}}


async def test_add_existing_category_fails(client, auth_headers):
    response = await client.post("/api/categories", json={"name": "kebaplar"}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to add category"


async def test_add_category_requires_a_name(client, auth_headers):
    response = await client.post("/api/categories", json={"name": "   "}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Category name is required"


async def test_delete_category_removes_items_and_images(client, auth_headers, store):
    await client.post(
        "/api/menu-items",
        data={"category": "tatlilar", "name": "Künefe", "price": "150"},
        files={"image": ("kunefe.png", make_png(), "image/png")},
        headers=auth_headers,
    )

    response = await client.delete("/api/categories/tatlilar", headers=auth_headers)

    assert response.status_code == 200
    assert "tatlilar" not in (await client.get("/api/menu-items")).json()
    assert not [key for key in store.objects if key.startswith("images/")]


async def test_delete_category_with_spaces_in_name(client, auth_headers):
    response = await client.delete("/api/categories/pide%20cesitleri", headers=auth_headers)

    assert response.status_code == 200
    assert "pide cesitleri" not in (await client.get("/api/menu-items")).json()


async def test_delete_unknown_category_fails(client, auth_headers):
    response = await client.delete("/api/categories/yok", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to delete category"


@pytest.mark.parametrize("path", ["/api/categories/Sıcak%2FSoğuk", "/api/categories/Sıcak/Soğuk"])
async def test_category_with_slash_in_name_can_be_deleted(client, auth_headers, path):
    created = await client.post("/api/categories", json={"name": "Sıcak/Soğuk"}, headers=auth_headers)
    assert created.status_code == 200

    response = await client.delete(path, headers=auth_headers)

    assert response.status_code == 200
    assert "Sıcak/Soğuk" not in (await client.get("/api/menu-items")).json()
