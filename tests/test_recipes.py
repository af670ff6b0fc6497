from baker_recipes.app.db import models
from baker_recipes.app.services import recipes_service


def create(client, payload):
    response = client.post("/recipes", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()


def test_create_and_read_recipe(client, basic_loaf):
    body = create(client, basic_loaf)
    assert body["id"]
    assert body["name"] == "Basic Loaf"
    assert body["weightPerUnit"] == 900
    assert body["totalWeight"] == 900
    assert [i["name"] for i in body["ingredients"]] == ["Flour", "Water", "Salt", "Yeast"]
    assert body["ingredients"][3] == {"name": "Yeast", "type": "yeast", "percentage": 8, "weight": 40}

    response = client.get(f"/recipes/{body['id']}")
    assert response.status_code == 200
    assert response.json()["ingredients"] == body["ingredients"]

    listing = client.get("/recipes")
    assert listing.status_code == 200
    assert [r["id"] for r in listing.json()] == [body["id"]]


def test_create_derives_missing_weights(client, basic_loaf):
    for ingredient in basic_loaf["ingredients"][1:]:
        del ingredient["weight"]
    body = create(client, basic_loaf)
    assert [i["weight"] for i in body["ingredients"]] == [500, 350, 10, 40]


def test_create_rejects_invalid_recipe_and_persists_nothing(client, db_session, basic_loaf):
    basic_loaf["ingredients"][0]["percentage"] = 95
    basic_loaf["ingredients"].append({"name": "salt", "type": "salt", "percentage": 0, "weight": 0})
    response = client.post("/recipes", json=basic_loaf)
    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "invalid_recipe"
    assert body["message"] == "Recipe failed validation."
    assert {d["code"] for d in body["details"]} == {"flour_percentage_sum", "duplicate_ingredient_name"}
    assert all(d["kind"] == "invariant" for d in body["details"])
    assert db_session.query(models.Recipe).count() == 0


def test_create_reports_structural_errors(client, basic_loaf):
    basic_loaf["ingredients"][1]["type"] = "base"
    del basic_loaf["name"]
    response = client.post("/recipes", json=basic_loaf)
    assert response.status_code == 400
    fields = {d["field"] for d in response.json()["details"]}
    assert fields == {"name", "ingredients.1.type"}


def test_create_requires_json_object(client):
    response = client.post("/recipes", json=["not", "an", "object"])
    assert response.status_code == 422
    assert response.json()["error_code"] == "validation_error"


def test_update_replaces_recipe(client, basic_loaf):
    recipe_id = create(client, basic_loaf)["id"]
    replacement = {
        "name": "Basic Loaf x2",
        "quantity": 2,
        "weightPerUnit": 900,
        "ingredients": [
            {"name": "Flour", "type": "flour", "percentage": 100, "weight": 1000},
            {"name": "Water", "type": "liquid", "percentage": 80},
        ],
        "instructions": "Mix. Rest. Bake.",
    }
    response = client.put(f"/recipes/{recipe_id}", json=replacement)
    assert response.status_code == 200, response.json()
    body = response.json()
    assert body["id"] == recipe_id
    assert body["totalWeight"] == 1800
    assert [i["name"] for i in body["ingredients"]] == ["Flour", "Water"]
    assert body["ingredients"][1]["weight"] == 800

    fetched = client.get(f"/recipes/{recipe_id}").json()
    assert fetched["name"] == "Basic Loaf x2"
    assert len(fetched["ingredients"]) == 2


def test_update_rejects_invalid_replacement(client, basic_loaf):
    recipe_id = create(client, basic_loaf)["id"]
    broken = dict(basic_loaf, totalWeight=1000)
    response = client.put(f"/recipes/{recipe_id}", json=broken)
    assert response.status_code == 400
    codes = {d["code"] for d in response.json()["details"]}
    assert codes == {"total_weight_mismatch", "ingredient_sum_mismatch"}
    assert client.get(f"/recipes/{recipe_id}").json()["totalWeight"] == 900


def test_update_unknown_recipe_is_not_found_before_validation(client, monkeypatch):
    calls = []
    monkeypatch.setattr(recipes_service, "validate_candidate", lambda *args, **kwargs: calls.append(args))
    response = client.put("/recipes/9999", json={"name": ""})
    assert response.status_code == 404
    assert response.json()["detail"] == "Recipe not found"
    assert calls == []


def test_delete_recipe(client, basic_loaf):
    recipe_id = create(client, basic_loaf)["id"]
    response = client.delete(f"/recipes/{recipe_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Recipe deleted"}
    assert client.get(f"/recipes/{recipe_id}").status_code == 404
    assert client.delete(f"/recipes/{recipe_id}").status_code == 404


def test_get_missing_recipe(client):
    response = client.get("/recipes/12345")
    assert response.status_code == 404
    assert response.json()["detail"] == "Recipe not found"


def test_validate_endpoint_does_not_persist(client, db_session, basic_loaf):
    response = client.post("/recipes/validate", json=basic_loaf)
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["errors"] == []
    assert body["recipe"]["totalWeight"] == 900

    basic_loaf["ingredients"] = basic_loaf["ingredients"][1:]
    body = client.post("/recipes/validate", json=basic_loaf).json()
    assert body["ok"] is False
    assert body["recipe"] is None
    assert "missing_flour" in {e["code"] for e in body["errors"]}
    assert db_session.query(models.Recipe).count() == 0


def test_scale_recipe_preview(client, basic_loaf):
    recipe_id = create(client, basic_loaf)["id"]
    response = client.post(f"/recipes/{recipe_id}/scale", json={"quantity": 3})
    assert response.status_code == 200, response.json()
    body = response.json()
    assert body["quantity"] == 3
    assert body["totalWeight"] == 2700
    assert [i["weight"] for i in body["ingredients"]] == [1500, 1050, 30, 120]
    assert client.get(f"/recipes/{recipe_id}").json()["totalWeight"] == 900


def test_scale_recipe_requires_a_batch_field(client, basic_loaf):
    recipe_id = create(client, basic_loaf)["id"]
    response = client.post(f"/recipes/{recipe_id}/scale", json={})
    assert response.status_code == 422
    assert response.json()["error_code"] == "validation_error"


def test_scale_recipe_beyond_weight_limit_is_rejected(client, basic_loaf):
    recipe_id = create(client, basic_loaf)["id"]
    response = client.post(f"/recipes/{recipe_id}/scale", json={"quantity": 1_000_000, "weightPerUnit": 1_000_000})
    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "invalid_recipe"
    assert "totalWeight" in {d["field"] for d in body["details"]}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
