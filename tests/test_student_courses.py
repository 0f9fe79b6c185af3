from conftest import buy_course, create_course


def test_listing_shows_only_published_courses(client, instructor, student):
    headers, _ = instructor
    published = create_course(client, headers, title="Published")
    create_course(client, headers, title="Draft", is_published=False)

    resp = client.get("/student/course", headers=student[0])
    assert resp.status_code == 200
    body = resp.json()
    assert [c["_id"] for c in body] == [published["_id"]]
    assert "students" not in body[0]
    assert body[0]["students_count"] == 0


def test_publish_and_unpublish_toggle_visibility(client, instructor, student):
    headers, _ = instructor
    course = create_course(client, headers, is_published=False)
    url = f"/student/course/{course['_id']}"

    assert client.get("/student/course", headers=student[0]).json() == []
    assert client.get(url, headers=student[0]).status_code == 404

    client.put(f"/instructor/course/{course['_id']}", json={"is_published": True}, headers=headers)
    assert [c["_id"] for c in client.get("/student/course", headers=student[0]).json()] == [course["_id"]]
    resp = client.get(url, headers=student[0])
    assert resp.status_code == 200
    assert resp.json()["title"] == "Intro to Python"

    client.put(f"/instructor/course/{course['_id']}", json={"is_published": False}, headers=headers)
    assert client.get("/student/course", headers=student[0]).json() == []
    assert client.get(url, headers=student[0]).status_code == 404


def test_listing_filters_and_sorting(client, instructor, student):
    headers, _ = instructor
    create_course(client, headers, title="Alpha", pricing=30, category="design", level="advanced")
    create_course(client, headers, title="Beta", pricing=10, category="programming", primary_language="spanish")
    create_course(client, headers, title="Gamma", pricing=20, category="programming")

    def titles(**params):
        resp = client.get("/student/course", params=params, headers=student[0])
        assert resp.status_code == 200
        return [c["title"] for c in resp.json()]

    assert titles() == ["Beta", "Gamma", "Alpha"]
    assert titles(sort_by="price-hightolow") == ["Alpha", "Gamma", "Beta"]
    assert titles(sort_by="title-ztoa") == ["Gamma", "Beta", "Alpha"]
    assert titles(category="programming", sort_by="title-atoz") == ["Beta", "Gamma"]
    assert titles(category="design,programming", level="advanced") == ["Alpha"]
    assert titles(primary_language="spanish") == ["Beta"]


def test_unknown_sort_is_rejected(client, student):
    resp = client.get("/student/course", params={"sort_by": "newest"}, headers=student[0])
    assert resp.status_code == 422


def test_listing_requires_token(client):
    assert client.get("/student/course").status_code == 401


def test_purchase_info_and_courses_bought(client, gateway, instructor, student):
    headers, _ = instructor
    course = create_course(client, headers)
    other = create_course(client, headers, title="Other")
    url = f"/student/course/{course['_id']}/purchase-info"

    assert client.get(url, headers=student[0]).json() == {"course_id": course["_id"], "purchased": False}
    assert client.get("/student/courses-bought", headers=student[0]).json() == []

    buy_course(client, gateway, student[0], course["_id"])

    assert client.get(url, headers=student[0]).json()["purchased"] is True
    bought = client.get("/student/courses-bought", headers=student[0]).json()
    assert [b["course_id"] for b in bought] == [course["_id"]]
    assert bought[0]["paid_amount"] == 49.99
    assert bought[0]["date_of_purchase"] is not None
    assert other["_id"] not in [b["course_id"] for b in bought]


def test_catalog_hides_paid_lecture_media(client, instructor, student):
    curriculum = [
        {"title": "Welcome", "video_url": "https://media.test/a", "public_id": "lms/a", "free_preview": True},
        {"title": "Variables", "video_url": "https://media.test/b", "public_id": "lms/b"},
    ]
    course = create_course(client, instructor[0], curriculum=curriculum)

    detail = client.get(f"/student/course/{course['_id']}", headers=student[0]).json()
    listed = client.get("/student/course", headers=student[0]).json()[0]
    for view in (detail, listed):
        free, paid = view["curriculum"]
        assert free["video_url"] == "https://media.test/a"
        assert free["public_id"] == "lms/a"
        assert paid["title"] == "Variables"
        assert paid["lecture_id"] == course["curriculum"][1]["lecture_id"]
        assert paid["video_url"] is None
        assert paid["public_id"] is None

    # the owner still sees everything
    owned = client.get(f"/instructor/course/{course['_id']}", headers=instructor[0]).json()
    assert owned["curriculum"][1]["public_id"] == "lms/b"
