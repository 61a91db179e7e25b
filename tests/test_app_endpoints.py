import io
from datetime import timedelta

import pandas as pd
from fastapi.testclient import TestClient

from gymdash.services.member_service import subscription_status

MEMBER = {
    "name": "Sara",
    "phone": "0500000000",
    "subscriptionType": "Monthly Fitness & Sauna",
    "startDate": "2026-01-10",
    "endDate": "2026-02-10",
    "gender": "female",
    "age": 29,
    "weight": 60,
    "height": 165,
    "dailyCalories": 1900,
}


def _login(client: TestClient, email: str, password: str) -> None:
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200


def test_member_crud(admin_client):
    c = admin_client
    r = c.post("/api/members", json=MEMBER)
    assert r.status_code == 200
    member_id = r.json()["id"]

    got = c.get(f"/api/members/{member_id}").json()
    assert got["name"] == "Sara"
    assert got["subscriptionType"] == "Monthly Fitness & Sauna"

    update = {**MEMBER, "name": "Sara K", "weight": 58, "mealPlan": "high protein", "subscriptionType": "Yearly"}
    assert c.put(f"/api/members/{member_id}", json=update).status_code == 204
    got = c.get(f"/api/members/{member_id}").json()
    assert got["name"] == "Sara K"
    assert got["weight"] == 58
    assert got["mealPlan"] == "high protein"
    # subscription is not part of the profile update
    assert got["subscriptionType"] == "Monthly Fitness & Sauna"

    assert c.delete(f"/api/members/{member_id}").status_code == 204
    r = c.get(f"/api/members/{member_id}")
    assert r.status_code == 404
    assert r.text == "Member not found"
    assert c.delete(f"/api/members/{member_id}").status_code == 204


def test_members_listed_newest_first(admin_client):
    c = admin_client
    c.post("/api/members", json={**MEMBER, "name": "Old", "startDate": "2025-05-01"})
    c.post("/api/members", json={**MEMBER, "name": "New", "startDate": "2026-03-01"})
    names = [m["name"] for m in c.get("/api/members").json()]
    assert names == ["New", "Old"]


def test_member_name_required(admin_client):
    r = admin_client.post("/api/members", json={**MEMBER, "name": "  "})
    assert r.status_code == 400


def test_update_missing_member(admin_client):
    assert admin_client.put("/api/members/999", json=MEMBER).status_code == 404


def test_members_csv_export(admin_client):
    admin_client.post("/api/members", json=MEMBER)
    r = admin_client.get("/api/members/export.csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    df = pd.read_csv(io.StringIO(r.text))
    assert list(df["name"]) == ["Sara"]
    assert "mealPlan" in df.columns


def test_pricing_and_profits(admin_client):
    c = admin_client
    assert c.get("/api/settings").json() == {}
    pricing = {"monthlyFitness": 100, "sauna": 50, "yearly": 900}
    assert c.post("/api/settings", json=pricing).status_code == 204
    assert c.get("/api/settings").json() == pricing

    c.post("/api/members", json=MEMBER)  # 150, Jan 2026
    c.post("/api/members", json={**MEMBER, "subscriptionType": "Yearly", "startDate": "2026-02-03"})
    c.post("/api/members", json={**MEMBER, "subscriptionType": "Boxing", "startDate": None})

    stats = c.get("/api/profits").json()
    assert stats["totalRevenue"] == 1050
    assert stats["totalMembers"] == 3
    assert stats["averageRevenuePerMember"] == 350
    assert stats["monthlyRevenue"] == [
        {"name": "2026-01", "total": 150},
        {"name": "2026-02", "total": 900},
    ]


def test_pricing_values_must_be_numbers(admin_client):
    r = admin_client.post("/api/settings", json={"monthlyFitness": "cheap"})
    assert r.status_code == 400

    for raw in ('{"monthlyFitness": NaN}', '{"monthlyFitness": Infinity}', '{"sauna": -Infinity}'):
        r = admin_client.post("/api/settings", content=raw, headers={"content-type": "application/json"})
        assert r.status_code == 400
    assert admin_client.get("/api/settings").json() == {}
    assert admin_client.get("/api/profits").status_code == 200


def test_assistant_lifecycle(admin_client):
    c = admin_client
    r = c.post("/api/users/assistants", json={"email": "helper@x.com", "password": "pw"})
    assert r.status_code == 201
    helper_id = r.json()["id"]
    assert c.get("/api/users/assistants").json() == [
        {"id": helper_id, "email": "helper@x.com", "role": "assistant"}
    ]

    _login(c, "helper@x.com", "pw")
    me = c.get("/api/auth/me").json()
    assert me["role"] == "assistant"
    assert me["admin_id"] is not None
    # assistants can work with members but not with admin-only routes
    assert c.get("/api/members").status_code == 200
    assert c.get("/api/profits").status_code == 403
    assert c.post("/api/settings", json={"x": 1}).status_code == 403
    assert c.get("/api/users/assistants").status_code == 403

    _login(c, "a@x.com", "secret")
    assert c.delete(f"/api/users/assistants/{helper_id}").status_code == 204
    assert c.get("/api/users/assistants").json() == []
    assert c.post("/api/auth/login", json={"email": "helper@x.com", "password": "pw"}).status_code == 401


def test_admin_cannot_delete_self_or_foreign_assistants(admin_client):
    c = admin_client
    me = c.get("/api/auth/me").json()
    assert c.delete(f"/api/users/assistants/{me['id']}").status_code == 204
    assert c.get("/api/auth/me").status_code == 200

    c.post("/api/auth/signup", json={"email": "b@x.com", "password": "secret"})
    _login(c, "b@x.com", "secret")
    foreign = c.post("/api/users/assistants", json={"email": "bh@x.com", "password": "pw"}).json()["id"]

    _login(c, "a@x.com", "secret")
    c.delete(f"/api/users/assistants/{foreign}")
    _login(c, "b@x.com", "secret")
    assert [a["id"] for a in c.get("/api/users/assistants").json()] == [foreign]


def test_admin_routes_need_a_session(client):
    assert client.get("/api/profits").status_code == 401
    assert client.get("/api/users/assistants").status_code == 401


def test_public_member_profile_needs_no_session(admin_client, clock):
    c = admin_client
    soon = (clock.now + timedelta(days=1)).date().isoformat()
    member_id = c.post("/api/members", json={**MEMBER, "endDate": soon}).json()["id"]
    lapsed_id = c.post("/api/members", json={**MEMBER, "name": "Omar", "endDate": "2020-01-31"}).json()["id"]

    c.cookies.clear()
    assert c.get(f"/api/members/{member_id}").status_code == 401

    r = c.get(f"/api/public/members/{member_id}")
    assert r.status_code == 200
    assert r.json() == {
        "id": member_id,
        "name": "Sara",
        "subscriptionType": "Monthly Fitness & Sauna",
        "endDate": soon,
        "status": "Active",
    }
    assert c.get(f"/api/public/members/{lapsed_id}").json()["status"] == "Expired"

    clock.advance(days=3)
    assert c.get(f"/api/public/members/{member_id}").json()["status"] == "Expired"


def test_public_member_profile_missing(client):
    r = client.get("/api/public/members/999")
    assert r.status_code == 404
    assert r.text == "Member not found"


def test_subscription_status_without_end_date(clock):
    assert subscription_status(None, clock.now) == "Active"
    assert subscription_status("not a date", clock.now) == "Active"
