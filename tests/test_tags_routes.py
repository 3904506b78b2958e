API = "/api/v1/tags"


def test_catalog_lists_categories(client):
    response = client.get(f"{API}/catalog")
    assert response.status_code == 200
    categories = response.json()
    assert len(categories) == 6
    assert categories[0]["id"] == "tech"
    assert {"id": "tech_ai", "name": "Artificial Intelligence"} in categories[0]["options"]


def test_catalog_search_filters_one_category(client):
    response = client.get(f"{API}/catalog/sports", params={"q": "ball"})
    assert response.status_code == 200
    assert all("ball" in o["name"].lower() for o in response.json())
    assert response.json()


def test_replace_and_read_back_my_tags(client, db):
    db.seed("user_static_tags", {"user_id": "user-b", "tag_id": "sports_running"}, {"user_id": "user-c", "tag_id": "tech_ai"})

    saved = client.put(f"{API}/me", json={"tag_ids": ["tech_ai", "edu_history", "tech_ai"]})
    assert saved.status_code == 200
    assert saved.json() == {"user_id": "user-b", "tag_ids": ["tech_ai", "edu_history"]}

    mine = client.get(f"{API}/me").json()
    assert sorted(mine["tag_ids"]) == ["edu_history", "tech_ai"]
    assert len(db.rows("user_static_tags", user_id="user-c")) == 1


def test_empty_or_unknown_selection_is_rejected(client, db):
    empty = client.put(f"{API}/me", json={"tag_ids": []})
    assert empty.status_code == 400
    assert empty.json()["detail"] == "Please select at least one interest"

    unknown = client.put(f"{API}/me", json={"tag_ids": ["tech_ai", "tech_quantum"]})
    assert unknown.status_code == 400
    assert "tech_quantum" in unknown.json()["detail"]
    assert db.rows("user_static_tags") == []


def test_failed_delete_still_saves_new_tags(client, db):
    db.fail_on.add(("delete", "user_static_tags"))
    response = client.put(f"{API}/me", json={"tag_ids": ["lifestyle_travel"]})
    assert response.status_code == 200
    assert [r["tag_id"] for r in db.rows("user_static_tags", user_id="user-b")] == ["lifestyle_travel"]


def test_failed_insert_is_server_error(client, db):
    db.fail_on.add(("insert", "user_static_tags"))
    assert client.put(f"{API}/me", json={"tag_ids": ["lifestyle_travel"]}).status_code == 500


def test_match_score_endpoint(client):
    response = client.post(f"{API}/match-score", json={
        "interests_a": ["tech_ai", "sports_running", "hobbies_music"],
        "interests_b": ["tech_ai", "hobbies_music"],
    })
    assert response.status_code == 200
    assert response.json() == {"score": 2, "max_possible": 3, "percentage": 80.0}
