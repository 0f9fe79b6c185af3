from conftest import buy_course, course_payload, create_course, register


def test_create_course_assigns_owner_and_lecture_ids(client, instructor):
    headers, user = instructor
    course = create_course(client, headers)

    assert course["instructor_id"] == user["_id"]
    assert course["instructor_name"] == "ada"
    assert course["students"] == []
    lecture_ids = [item["lecture_id"] for item in course["curriculum"]]
    assert len(set(lecture_ids)) == 3
    assert [item["title"] for item in course["curriculum"]] == ["Welcome", "Variables", "Loops"]


def test_owner_fields_in_body_are_ignored(client, instructor):
    headers, user = instructor
    payload = course_payload(instructor_id="someone-else", instructor_name="Mallory")
    resp = client.post("/instructor/course", json=payload, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["instructor_id"] == user["_id"]


def test_create_course_validates_input(client, instructor):
    headers, _ = instructor
    resp = client.post("/instructor/course", json=course_payload(pricing=-1), headers=headers)
    assert resp.status_code == 422
    resp = client.post("/instructor/course", json={"title": "No fields"}, headers=headers)
    assert resp.status_code == 422


def test_list_only_own_courses(client, instructor):
    headers, _ = instructor
    other_headers, _ = register(client, "bob", role="instructor")
    create_course(client, headers, title="Mine")
    create_course(client, other_headers, title="Theirs")

    resp = client.get("/instructor/course", headers=headers)
    assert resp.status_code == 200
    assert [c["title"] for c in resp.json()] == ["Mine"]


def test_get_update_course(client, instructor):
    headers, _ = instructor
    course = create_course(client, headers, is_published=False)

    resp = client.get(f"/instructor/course/{course['_id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Intro to Python"

    resp = client.put(f"/instructor/course/{course['_id']}", json={"title": "Python 101", "pricing": 10}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Python 101"
    assert body["pricing"] == 10
    assert body["category"] == "programming"
    assert body["is_published"] is False


def test_update_curriculum_keeps_given_ids_and_fills_new(client, instructor):
    headers, _ = instructor
    course = create_course(client, headers)
    first = course["curriculum"][0]
    resp = client.put(f"/instructor/course/{course['_id']}", json={
        "curriculum": [first, {"title": "Functions"}],
    }, headers=headers)
    assert resp.status_code == 200
    curriculum = resp.json()["curriculum"]
    assert curriculum[0]["lecture_id"] == first["lecture_id"]
    assert curriculum[1]["lecture_id"]
    assert curriculum[1]["title"] == "Functions"


def test_other_instructor_cannot_touch_course(client, instructor):
    headers, _ = instructor
    course = create_course(client, headers)
    other_headers, _ = register(client, "bob", role="instructor")

    assert client.get(f"/instructor/course/{course['_id']}", headers=other_headers).status_code == 403
    resp = client.put(f"/instructor/course/{course['_id']}", json={"title": "Hijacked"}, headers=other_headers)
    assert resp.status_code == 403
    assert client.delete(f"/instructor/course/{course['_id']}", headers=other_headers).status_code == 403


def test_missing_course_is_not_found(client, instructor):
    headers, _ = instructor
    assert client.get("/instructor/course/not-an-id", headers=headers).status_code == 404
    assert client.get("/instructor/course/64b7f0c2a1b2c3d4e5f60718", headers=headers).status_code == 404
    resp = client.put("/instructor/course/64b7f0c2a1b2c3d4e5f60718", json={"title": "Nope"}, headers=headers)
    assert resp.status_code == 404


def test_delete_course(client, db, instructor):
    headers, _ = instructor
    course = create_course(client, headers)
    resp = client.delete(f"/instructor/course/{course['_id']}", headers=headers)
    assert resp.status_code == 204
    assert db.courses.count_documents({}) == 0
    assert client.get(f"/instructor/course/{course['_id']}", headers=headers).status_code == 404


def test_course_with_students_cannot_be_deleted(client, db, gateway, instructor, student):
    headers, _ = instructor
    course = create_course(client, headers)
    buy_course(client, gateway, student[0], course["_id"])

    resp = client.delete(f"/instructor/course/{course['_id']}", headers=headers)
    assert resp.status_code == 409
    assert db.courses.count_documents({}) == 1


def test_course_with_pending_order_cannot_be_deleted(client, db, instructor, student):
    headers, _ = instructor
    course = create_course(client, headers)
    resp = client.post("/student/order", json={"course_id": course["_id"]}, headers=student[0])
    assert resp.status_code == 201

    resp = client.delete(f"/instructor/course/{course['_id']}", headers=headers)
    assert resp.status_code == 409
    assert db.courses.count_documents({}) == 1


def test_course_with_only_failed_orders_can_be_deleted(client, db, gateway, instructor, student):
    headers, _ = instructor
    course = create_course(client, headers)
    order = client.post("/student/order", json={"course_id": course["_id"]}, headers=student[0]).json()["order"]
    gateway.set_status(order["external_payment_id"], "canceled")
    client.post("/student/order/capture", json={
        "order_id": order["_id"], "payment_id": order["external_payment_id"],
    }, headers=student[0])

    resp = client.delete(f"/instructor/course/{course['_id']}", headers=headers)
    assert resp.status_code == 204
