"""Tests for the resource library."""
from __future__ import annotations

from conftest import auth

ARTICLE = {
    "title": "Managing Academic Stress",
    "description": "Strategies for handling exam pressure.",
    "type": "article",
    "category": "academic",
    "url": "/resources/academic-stress.pdf",
    "author": "Dr. Sarah Johnson",
    "tags": ["stress", "exams"],
}
VIDEO = {
    "title": "Guided Breathing",
    "description": "A short relaxation session.",
    "type": "video",
    "url": "/resources/breathing.mp4",
    "author": "Wellness Team",
    "tags": ["relaxation"],
    "duration": "10 min",
}


def add(client, token, body):
    return client.post("/api/resources", headers=auth(token), json=body)


def test_counselor_creates_resource(client, counselor):
    token, _ = counselor
    response = add(client, token, VIDEO)
    assert response.status_code == 201
    resource = response.get_json()
    assert resource["category"] == "general"
    assert resource["tags"] == ["relaxation"]
    assert resource["rating"] == 0
    assert resource["downloads"] == 0
    assert resource["type"] == "video"


def test_students_cannot_manage_resources(client, student, counselor):
    token, _ = student
    assert add(client, token, ARTICLE).status_code == 403
    counselor_token, _ = counselor
    resource_id = add(client, counselor_token, ARTICLE).get_json()["id"]
    assert client.put(f"/api/resources/{resource_id}", headers=auth(token), json={"title": "x"}).status_code == 403
    assert client.delete(f"/api/resources/{resource_id}", headers=auth(token)).status_code == 403


def test_create_validation(client, counselor):
    token, _ = counselor
    assert add(client, token, {**ARTICLE, "type": "podcast"}).status_code == 400
    missing_author = {k: v for k, v in ARTICLE.items() if k != "author"}
    assert add(client, token, missing_author).status_code == 400


def test_listing_search_and_filters(client, student, counselor):
    token, _ = student
    counselor_token, _ = counselor
    article_id = add(client, counselor_token, ARTICLE).get_json()["id"]
    video_id = add(client, counselor_token, VIDEO).get_json()["id"]

    everything = client.get("/api/resources", headers=auth(token)).get_json()
    assert [r["id"] for r in everything] == [video_id, article_id]

    by_tag = client.get("/api/resources?q=EXAMS", headers=auth(token)).get_json()
    assert [r["id"] for r in by_tag] == [article_id]
    by_author = client.get("/api/resources?q=wellness team", headers=auth(token)).get_json()
    assert [r["id"] for r in by_author] == [video_id]

    videos = client.get("/api/resources/type/video", headers=auth(token)).get_json()
    assert [r["id"] for r in videos] == [video_id]
    assert client.get("/api/resources/type/podcast", headers=auth(token)).status_code == 400
    academic = client.get("/api/resources?category=Academic", headers=auth(token)).get_json()
    assert [r["id"] for r in academic] == [article_id]


def test_search_wildcards_match_literally(client, student, counselor):
    token, _ = student
    counselor_token, _ = counselor
    add(client, counselor_token, ARTICLE)
    percent_id = add(client, counselor_token, {**VIDEO, "title": "Breathing 100% of the way"}).get_json()["id"]

    found = client.get("/api/resources?q=%25", headers=auth(token)).get_json()
    assert [r["id"] for r in found] == [percent_id]
    assert client.get("/api/resources?q=_", headers=auth(token)).get_json() == []


def test_search_orders_by_rating_then_downloads(client, student, counselor):
    token, _ = student
    counselor_token, _ = counselor
    low = add(client, counselor_token, {**ARTICLE, "title": "Stress basics"}).get_json()["id"]
    high = add(client, counselor_token, {**ARTICLE, "title": "Stress advanced"}).get_json()["id"]
    client.post(f"/api/resources/{high}/rating", headers=auth(token), json={"rating": 4.5})
    results = client.get("/api/resources?q=stress", headers=auth(token)).get_json()
    assert [r["id"] for r in results] == [high, low]


def test_download_and_rating(client, student, counselor):
    token, _ = student
    counselor_token, _ = counselor
    resource_id = add(client, counselor_token, ARTICLE).get_json()["id"]
    client.post(f"/api/resources/{resource_id}/download", headers=auth(token))
    response = client.post(f"/api/resources/{resource_id}/download", headers=auth(token))
    assert response.get_json()["downloads"] == 2

    assert client.post(f"/api/resources/{resource_id}/rating", headers=auth(token),
                       json={"rating": 6}).status_code == 400
    response = client.post(f"/api/resources/{resource_id}/rating", headers=auth(token), json={"rating": 4})
    assert response.get_json()["rating"] == 4.0


def test_update_and_delete(client, counselor):
    token, _ = counselor
    resource_id = add(client, token, ARTICLE).get_json()["id"]
    response = client.put(f"/api/resources/{resource_id}", headers=auth(token),
                          json={"title": "Beating Exam Stress", "tags": ["exams", "sleep"]})
    resource = response.get_json()
    assert resource["title"] == "Beating Exam Stress"
    assert resource["tags"] == ["exams", "sleep"]
    assert resource["author"] == ARTICLE["author"]

    assert client.delete(f"/api/resources/{resource_id}", headers=auth(token)).status_code == 200
    assert client.get(f"/api/resources/{resource_id}", headers=auth(token)).status_code == 404
