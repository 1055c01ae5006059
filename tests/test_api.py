"""API tests for the PulseConnect backend, run in-process against SQLite."""
from datetime import datetime

from dateutil.relativedelta import relativedelta

from pulseconnect.core.timeutils import utcnow
from pulseconnect.models import BloodGroup, BloodRequest, Donor, RequestStatus

DONOR_PAYLOAD = {
    "full_name": "Asha Rao",
    "age": 29,
    "blood_group": "O-",
    "weight": 62.5,
    "whatsapp_number": "+91 98450 12345",
    "latitude": 12.9716,
    "longitude": 77.5946,
    "address": "MG Road, Bengaluru",
}

REQUEST_PAYLOAD = {
    "blood_group": "O-",
    "urgency": "critical",
    "latitude": 12.97,
    "longitude": 77.59,
    "address": "St. John's Hospital",
    "contact_number": "+91 80 2206 5000",
    "radius_km": 10,
}


def _register_donor(client, headers, **overrides):
    response = client.post("/api/v1/donors/", json={**DONOR_PAYLOAD, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_unauthenticated_requests_rejected(client):
    response = client.get("/api/v1/auth/user")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"

    response = client.get("/api/v1/auth/user", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_user_created_from_token_claims(client, auth_headers):
    headers = auth_headers("alice", email="alice@example.com", first_name="Alice")
    response = client.get("/api/v1/auth/user", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["subject"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["first_name"] == "Alice"

    # Second call resolves the same user
    assert client.get("/api/v1/auth/user", headers=headers).json()["id"] == body["id"]


def test_donor_registration_and_profile(client, auth_headers):
    headers = auth_headers("asha")
    donor = _register_donor(client, headers)
    assert donor["blood_group"] == "O-"
    assert donor["credits"] == 0
    assert donor["total_donations"] == 0
    assert donor["is_available"] is True

    response = client.post("/api/v1/donors/", json=DONOR_PAYLOAD, headers=headers)
    assert response.status_code == 400

    response = client.get("/api/v1/donors/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == donor["id"]

    response = client.put("/api/v1/donors/me", json={"is_available": False, "weight": 64}, headers=headers)
    assert response.status_code == 200
    assert response.json()["is_available"] is False
    assert response.json()["weight"] == 64

    public = client.get(f"/api/v1/donors/{donor['id']}").json()
    assert "credits" not in public
    assert public["full_name"] == "Asha Rao"


def test_donor_registration_validation(client, auth_headers):
    headers = auth_headers("bad-input")
    for bad in ({"blood_group": "Z+"}, {"latitude": 95}, {"weight": 10}):
        response = client.post("/api/v1/donors/", json={**DONOR_PAYLOAD, **bad}, headers=headers)
        assert response.status_code == 422


def test_profile_endpoints_require_donor(client, auth_headers):
    headers = auth_headers("not-a-donor")
    assert client.get("/api/v1/donors/me", headers=headers).status_code == 404
    assert client.get("/api/v1/donors/eligibility", headers=headers).status_code == 404
    assert client.get("/api/v1/credits/transactions", headers=headers).status_code == 404
    assert client.get("/api/v1/donors/999").status_code == 404


def test_search_orders_by_distance_and_filters(client, make_donor):
    near = make_donor(latitude=0.0, longitude=0.01, blood_group=BloodGroup.A_POS)
    far = make_donor(latitude=0.0, longitude=0.1, blood_group=BloodGroup.A_POS)
    make_donor(latitude=0.0, longitude=0.0, blood_group=BloodGroup.A_POS, is_available=False)
    make_donor(latitude=0.0, longitude=0.02, blood_group=BloodGroup.B_POS)

    response = client.get(
        "/api/v1/donors/search",
        params={"latitude": 0, "longitude": 0, "radius": 15, "bloodGroup": "A+"},
    )
    assert response.status_code == 200
    results = response.json()
    assert [r["id"] for r in results] == [near.id, far.id]
    assert results[0]["distance_km"] < results[1]["distance_km"]

    response = client.get("/api/v1/donors/search", params={"latitude": 0, "longitude": 0, "radius": 5})
    assert len(response.json()) == 2


def test_search_treats_unescaped_plus_as_positive(client, make_donor):
    donor = make_donor(blood_group=BloodGroup.AB_POS)
    response = client.get("/api/v1/donors/search?latitude=0&longitude=0&radius=5&bloodGroup=AB+")
    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [donor.id]


def test_search_parameter_errors(client):
    assert client.get("/api/v1/donors/search", params={"longitude": 0}).status_code == 422
    assert client.get("/api/v1/donors/search", params={"latitude": 0, "longitude": 0, "radius": 0}).status_code == 422
    response = client.get(
        "/api/v1/donors/search", params={"latitude": 0, "longitude": 0, "bloodGroup": "Q-"}
    )
    assert response.status_code == 400
    assert "Invalid blood group" in response.json()["detail"]


def test_search_accepts_arbitrary_positive_radius(client, make_donor):
    donor = make_donor(latitude=0.0, longitude=0.6)
    params = {"latitude": 0, "longitude": 0}
    assert client.get("/api/v1/donors/search", params={**params, "radius": 50}).json() == []
    found = client.get("/api/v1/donors/search", params={**params, "radius": 67}).json()
    assert [r["id"] for r in found] == [donor.id]


def test_blood_request_lifecycle(client, auth_headers):
    owner = auth_headers("requester")
    other = auth_headers("someone-else")

    response = client.post("/api/v1/blood-requests/", json=REQUEST_PAYLOAD, headers=owner)
    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "active"

    assert [r["id"] for r in client.get("/api/v1/blood-requests/").json()] == [created["id"]]
    assert [r["id"] for r in client.get("/api/v1/blood-requests/me", headers=owner).json()] == [created["id"]]
    assert client.get("/api/v1/blood-requests/me", headers=other).json() == []

    url = f"/api/v1/blood-requests/{created['id']}/status"
    assert client.put(url, json={"status": "cancelled"}, headers=other).status_code == 403
    assert client.put(url, json={"status": "active"}, headers=owner).status_code == 409

    response = client.put(url, json={"status": "cancelled"}, headers=owner)
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    # Terminal state
    assert client.put(url, json={"status": "fulfilled"}, headers=owner).status_code == 409
    assert client.get("/api/v1/blood-requests/").json() == []
    assert client.put("/api/v1/blood-requests/999/status", json={"status": "cancelled"}, headers=owner).status_code == 404


def test_donor_responds_to_request(client, auth_headers):
    owner = auth_headers("requester")
    donor_headers = auth_headers("donor")
    _register_donor(client, donor_headers)
    request_id = client.post("/api/v1/blood-requests/", json=REQUEST_PAYLOAD, headers=owner).json()["id"]

    url = f"/api/v1/blood-requests/{request_id}/respond"
    assert client.post(url, json={"status": "accepted"}, headers=owner).status_code == 403
    assert client.post(url, json={"status": "maybe"}, headers=donor_headers).status_code == 422

    response = client.post(url, json={"status": "accepted"}, headers=donor_headers)
    assert response.status_code == 201
    assert response.json()["status"] == "accepted"

    assert client.post(url, json={"status": "rejected"}, headers=donor_headers).status_code == 409

    mine = client.get("/api/v1/blood-requests/responses/me", headers=owner).json()
    assert [r["request_id"] for r in mine] == [request_id]
    per_request = client.get(f"/api/v1/blood-requests/{request_id}/responses", headers=owner)
    assert per_request.status_code == 200
    assert len(per_request.json()) == 1
    assert client.get(f"/api/v1/blood-requests/{request_id}/responses", headers=donor_headers).status_code == 403


def test_record_donation_and_eligibility(client, auth_headers):
    headers = auth_headers("donor")
    _register_donor(client, headers)

    assert client.get("/api/v1/donors/eligibility", headers=headers).json() == {
        "can_donate": True,
        "next_eligible_date": None,
    }

    response = client.post("/api/v1/donations/", json={"hospital_name": "Victoria Hospital"}, headers=headers)
    assert response.status_code == 201
    donation = response.json()
    assert donation["credits_earned"] == 5
    assert donation["blood_group"] == "O-"

    profile = client.get("/api/v1/donors/me", headers=headers).json()
    assert profile["credits"] == 5
    assert profile["total_donations"] == 1

    eligibility = client.get("/api/v1/donors/eligibility", headers=headers).json()
    assert eligibility["can_donate"] is False
    assert eligibility["next_eligible_date"] is not None

    response = client.post("/api/v1/donations/", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Not eligible to donate yet"
    assert "next_eligible_date" in response.json()

    history = client.get("/api/v1/donations/me", headers=headers).json()
    assert [d["id"] for d in history] == [donation["id"]]


def test_last_donation_date_locked_once_donations_recorded(client, auth_headers):
    headers = auth_headers("donor")
    _register_donor(client, headers)
    assert client.post("/api/v1/donations/", json={}, headers=headers).status_code == 201

    response = client.put("/api/v1/donors/me", json={"last_donation_date": None}, headers=headers)
    assert response.status_code == 400
    response = client.put("/api/v1/donors/me", json={"last_donation_date": "2020-01-01T00:00:00"}, headers=headers)
    assert response.status_code == 400

    response = client.put("/api/v1/donors/me", json={"is_available": False}, headers=headers)
    assert response.status_code == 200

    assert client.get("/api/v1/donors/eligibility", headers=headers).json()["can_donate"] is False
    assert client.post("/api/v1/donations/", json={}, headers=headers).status_code == 400


def test_self_reported_date_editable_before_first_donation(client, auth_headers):
    headers = auth_headers("donor")
    _register_donor(client, headers)
    recent = (utcnow() - relativedelta(months=1)).isoformat()

    response = client.put("/api/v1/donors/me", json={"last_donation_date": recent}, headers=headers)
    assert response.status_code == 200
    assert client.get("/api/v1/donors/eligibility", headers=headers).json()["can_donate"] is False

    response = client.put("/api/v1/donors/me", json={"last_donation_date": None}, headers=headers)
    assert response.status_code == 200
    assert client.get("/api/v1/donors/eligibility", headers=headers).json()["can_donate"] is True


def test_registration_with_old_last_donation_allows_donation(client, auth_headers):
    headers = auth_headers("returning-donor")
    old = (utcnow() - relativedelta(months=7)).isoformat()
    _register_donor(client, headers, last_donation_date=old)
    assert client.get("/api/v1/donors/eligibility", headers=headers).json()["can_donate"] is True
    assert client.post("/api/v1/donations/", json={}, headers=headers).status_code == 201


def test_spend_credits(client, auth_headers):
    headers = auth_headers("donor")
    _register_donor(client, headers)
    client.post("/api/v1/donations/", json={}, headers=headers)

    response = client.post("/api/v1/credits/spend", json={"amount": 6, "description": "priority"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Insufficient credits"

    response = client.post("/api/v1/credits/spend", json={"amount": 0, "description": "nothing"}, headers=headers)
    assert response.status_code == 422

    response = client.post("/api/v1/credits/spend", json={"amount": 3, "description": "priority"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["credits"] == 2
    assert response.json()["transaction"]["transaction_type"] == "spent"

    balance = client.get("/api/v1/credits/balance", headers=headers).json()
    assert balance["credits"] == balance["ledger_balance"] == 2

    transactions = client.get("/api/v1/credits/transactions", headers=headers).json()
    assert [t["transaction_type"] for t in transactions] == ["spent", "earned"]


def test_verify_donation_endpoint(client, auth_headers, session_factory):
    owner = auth_headers("requester")
    donor_headers = auth_headers("donor")
    donor = _register_donor(client, donor_headers)
    request_id = client.post("/api/v1/blood-requests/", json=REQUEST_PAYLOAD, headers=owner).json()["id"]
    other_id = client.post("/api/v1/blood-requests/", json=REQUEST_PAYLOAD, headers=owner).json()["id"]

    url = f"/api/v1/requests/{request_id}/verify"
    assert client.post(url, json={"donor_id": donor["id"]}, headers=donor_headers).status_code == 403
    assert client.post(url, json={"donor_id": 999}, headers=owner).status_code == 404

    response = client.post(
        url,
        json={"donor_id": donor["id"], "donation_date": "2026-10-18T09:00:00Z", "units_given": 1},
        headers=owner,
    )
    assert response.status_code == 200, response.text
    assert response.json()["request_id"] == request_id

    assert client.post(url, json={"donor_id": donor["id"]}, headers=owner).status_code == 409
    assert client.post("/api/v1/requests/999/verify", json={"donor_id": donor["id"]}, headers=owner).status_code == 404

    db = session_factory()
    try:
        assert db.get(BloodRequest, request_id).status == RequestStatus.FULFILLED
        assert db.get(BloodRequest, other_id).status == RequestStatus.ACTIVE
        stored = db.get(Donor, donor["id"])
        assert stored.credits == 5
        assert stored.last_donation_date == datetime(2026, 10, 18, 9, 0)
    finally:
        db.close()
