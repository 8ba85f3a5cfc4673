def test_supervisor_summary_covers_scope(api_client, auth_headers):
    response = api_client.get("/api/analytics/summary", headers=auth_headers("supervisor"))
    assert response.status_code == 200
    body = response.json()
    assert body["scope_status"] == "ok"
    assert body["totals"]["count"] == 3
    assert body["totals"]["total_value"] == 630000
    assert body["totals"]["total_fees"] == 6300
    assert [g["key"] for g in body["top_commodities"]] == ["Rice", "Gram", "Cotton"]
    assert [g["key"] for g in body["monthly"]] == ["May 2024", "Jun 2024"]


def test_director_summary_breakdowns(api_client, auth_headers):
    body = api_client.get("/api/analytics/summary", headers=auth_headers("jd")).json()
    assert {g["key"]: g["count"] for g in body["by_district"]} == {"East Godavari": 3, "Guntur": 1}
    assert len(body["by_committee"]) == 3


def test_analytics_forbidden_for_deo_and_officer(api_client, auth_headers):
    for login_id in ("deo", "officer"):
        assert api_client.get("/api/analytics/summary", headers=auth_headers(login_id)).status_code == 403


def test_trader_statistics(api_client, auth_headers):
    response = api_client.get("/api/analytics/traders", headers=auth_headers("jd"))
    assert response.status_code == 200
    body = response.json()
    assert body["total_traders"] == 4
    assert body["average_receipts_per_trader"] == 1
    assert body["top_traders"][0]["name"] == "Mohan Rao"

    search = api_client.get("/api/analytics/traders", params={"q": "devi"}, headers=auth_headers("jd")).json()
    assert [t["name"] for t in search["traders"]] == ["Lakshmi Devi"]


def test_trader_detail(api_client, auth_headers):
    response = api_client.get("/api/analytics/traders/Rajesh Kumar", headers=auth_headers("jd"))
    assert response.status_code == 200
    body = response.json()
    assert body["receipt_count"] == 1
    assert body["monthly"][0]["key"] == "Jun 2024"
    assert body["receipts"][0]["id"] == "r1"

    missing = api_client.get("/api/analytics/traders/Nobody", headers=auth_headers("jd"))
    assert missing.status_code == 404


def test_trader_analytics_is_director_only(api_client, auth_headers):
    assert api_client.get("/api/analytics/traders", headers=auth_headers("supervisor")).status_code == 403


def test_committee_listing(api_client, auth_headers):
    body = api_client.get("/api/committees", headers=auth_headers("deo")).json()
    assert [c["id"] for c in body["committees"]] == ["c-tuni"]
    assert len(body["all_committees"]) == 3

    officer = api_client.get("/api/committees", headers=auth_headers("officer")).json()
    assert officer["scope_status"] == "no_access"
    assert officer["committees"] == []
