from amc_receipts.models.audit import AuditEventType


def test_list_users(api_client, auth_headers):
    response = api_client.get("/api/users", headers=auth_headers("jd"))
    assert response.status_code == 200
    assert {u["login_id"] for u in response.json()} == {"deo", "officer", "supervisor", "jd", "newdeo", "kkd_sup"}


def test_non_director_cannot_manage_users(api_client, auth_headers):
    for login_id in ("deo", "officer", "supervisor"):
        assert api_client.get("/api/users", headers=auth_headers(login_id)).status_code == 403


def test_create_user_then_login(api_client, auth_headers, audit_logger):
    response = api_client.post(
        "/api/users",
        json={
            "login_id": "Amalapuram_DEO",
            "name": "Amalapuram DEO",
            "password": "secret99",
            "role": "DEO",
            "committee": "Amalapuram AMC",
        },
        headers=auth_headers("jd"),
    )
    assert response.status_code == 201
    assert response.json()["login_id"] == "amalapuram_deo"

    login = api_client.post("/api/auth/login", json={"login_id": "amalapuram_deo", "password": "secret99"})
    assert login.status_code == 200

    created = audit_logger.repository.get_events_by_type(AuditEventType.USER_CREATED)
    assert created[0].actor == "jd"
    assert "password" not in created[0].data


def test_duplicate_login_id_conflicts(api_client, auth_headers):
    response = api_client.post(
        "/api/users",
        json={"login_id": "deo", "name": "Another", "password": "secret99", "role": "DEO"},
        headers=auth_headers("jd"),
    )
    assert response.status_code == 409


def test_reassigning_committee_takes_effect_immediately(api_client, auth_headers, users):
    headers = auth_headers("newdeo")
    assert api_client.get("/api/receipts", headers=headers).json()["scope_status"] == "unassigned"

    response = api_client.patch(
        f"/api/users/{users['newdeo'].user_id}",
        json={"committee": "Tuni AMC"},
        headers=auth_headers("jd"),
    )
    assert response.status_code == 200
    assert response.json()["committee"] == "Tuni AMC"

    # Same token, new scope
    body = api_client.get("/api/receipts", headers=headers).json()
    assert body["scope_status"] == "ok"
    assert body["total"] == 3


def test_deactivated_account_is_rejected(api_client, auth_headers, users):
    headers = auth_headers("deo")
    api_client.patch(f"/api/users/{users['deo'].user_id}", json={"is_active": False}, headers=auth_headers("jd"))
    assert api_client.get("/api/auth/me", headers=headers).status_code == 401


def test_delete_user(api_client, auth_headers, users):
    jd = auth_headers("jd")
    assert api_client.delete(f"/api/users/{users['kkd_sup'].user_id}", headers=jd).status_code == 204
    assert api_client.delete(f"/api/users/{users['kkd_sup'].user_id}", headers=jd).status_code == 404
    assert api_client.delete(f"/api/users/{users['jd'].user_id}", headers=jd).status_code == 400
