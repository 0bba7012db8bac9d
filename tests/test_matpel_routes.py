"""Subject (matpel) route tests."""

from models.subject import SubjectModel
from conftest import API


def _feature(client, admin, name="Private Class", **extra):
    return client.post(
        f"{API}/features",
        json={"name": name, "roles": "admin,tutor,participant", **extra},
        headers=admin["headers"],
    ).json()["data"]["id"]


def _create(client, headers, feature_id, name, **extra):
    return client.post(
        f"{API}/matpels",
        json={"feature_id": feature_id, "name": name, **extra},
        headers=headers,
    )


def test_create_subject(client, admin):
    feature_id = _feature(client, admin)

    response = _create(client, admin["headers"], feature_id, "Mathematics", deskripsi="Algebra")

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["feature_id"] == feature_id
    assert data["name"] == "Mathematics"
    assert data["deskripsi"] == "Algebra"
    assert data["is_active"] is True


def test_create_subject_with_unknown_feature(client, admin, db_session):
    response = _create(client, admin["headers"], 999, "Mathematics")

    assert response.status_code == 400
    assert response.json()["message"] == "feature_id not found or inactive"
    assert db_session.query(SubjectModel).count() == 0


def test_create_subject_under_inactive_feature(client, admin):
    feature_id = _feature(client, admin, is_active=False)

    response = _create(client, admin["headers"], feature_id, "Mathematics")

    assert response.status_code == 400


def test_subject_name_required(client, admin):
    feature_id = _feature(client, admin)

    assert _create(client, admin["headers"], feature_id, "   ").status_code == 400


def test_duplicate_subject_within_feature(client, admin):
    feature_id = _feature(client, admin)
    _create(client, admin["headers"], feature_id, "Mathematics")

    response = _create(client, admin["headers"], feature_id, "mathematics")

    assert response.status_code == 409


def test_same_subject_name_in_other_feature(client, admin):
    first = _feature(client, admin, name="Private Class")
    second = _feature(client, admin, name="Group Class")
    _create(client, admin["headers"], first, "Mathematics")

    response = _create(client, admin["headers"], second, "Mathematics")

    assert response.status_code == 201


def test_tutor_cannot_create_subject(client, admin, tutor):
    feature_id = _feature(client, admin)

    response = _create(client, tutor["headers"], feature_id, "Mathematics")

    assert response.status_code == 403


def test_update_subject_keeping_its_name(client, admin, catalog):
    response = client.put(
        f"{API}/matpels/{catalog['subject_id']}",
        json={
            "feature_id": catalog["feature_id"],
            "name": "Mathematics",
            "deskripsi": "Updated",
            "is_active": True,
        },
        headers=admin["headers"],
    )

    assert response.status_code == 200
    assert response.json()["data"]["deskripsi"] == "Updated"


def test_update_subject_to_sibling_name_conflicts(client, admin, catalog):
    _create(client, admin["headers"], catalog["feature_id"], "Physics")

    response = client.put(
        f"{API}/matpels/{catalog['subject_id']}",
        json={"feature_id": catalog["feature_id"], "name": "PHYSICS"},
        headers=admin["headers"],
    )

    assert response.status_code == 409


def test_update_missing_subject_is_404(client, admin, catalog):
    response = client.put(
        f"{API}/matpels/999",
        json={"feature_id": catalog["feature_id"], "name": "Physics"},
        headers=admin["headers"],
    )

    assert response.status_code == 404


def test_list_subjects_skips_inactive(client, admin, participant, catalog):
    _create(client, admin["headers"], catalog["feature_id"], "Retired", is_active=False)

    response = client.get(f"{API}/matpels/{catalog['feature_id']}", headers=participant["headers"])

    assert response.status_code == 200
    assert [s["name"] for s in response.json()["data"]] == ["Mathematics"]


def test_show_subject(client, tutor, catalog):
    response = client.get(f"{API}/matpels/show/{catalog['subject_id']}", headers=tutor["headers"])

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Mathematics"
    assert client.get(f"{API}/matpels/show/999", headers=tutor["headers"]).status_code == 404


def test_delete_subject(client, admin, catalog, db_session):
    response = client.delete(f"{API}/matpels/{catalog['subject_id']}", headers=admin["headers"])

    assert response.status_code == 200
    assert db_session.query(SubjectModel).count() == 0


def test_participant_cannot_delete_subject(client, participant, catalog):
    response = client.delete(
        f"{API}/matpels/{catalog['subject_id']}", headers=participant["headers"]
    )

    assert response.status_code == 403


def test_unused_subject_can_move_to_other_feature(client, admin, catalog):
    other_feature = _feature(client, admin, name="Group Class")

    response = client.put(
        f"{API}/matpels/{catalog['subject_id']}",
        json={"feature_id": other_feature, "name": "Mathematics"},
        headers=admin["headers"],
    )

    assert response.status_code == 200
    assert response.json()["data"]["feature_id"] == other_feature
    response = client.delete(f"{API}/features/{catalog['feature_id']}", headers=admin["headers"])
    assert response.status_code == 200
