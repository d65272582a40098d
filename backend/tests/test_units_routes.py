"""
Unit (serialized stock) API tests.

Verifies:
- Every list endpoint requires a token
- Search across all descriptive columns, status/date filters, paging
- Intake validation, partial edits, delete guard
"""

from datetime import date

import pytest

from conftest import make_unit


# =============================================================================
# UNAUTHENTICATED ACCESS: 401
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/units"),
            ("POST", "/api/units"),
            ("GET", "/api/units/1"),
            ("PATCH", "/api/units/1"),
            ("DELETE", "/api/units/1"),
            ("GET", "/api/accessories"),
            ("POST", "/api/accessories"),
            ("GET", "/api/sales"),
            ("GET", "/api/sales/summary"),
            ("POST", "/api/sales"),
            ("DELETE", "/api/sales/1"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/units", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401


# =============================================================================
# LISTING
# =============================================================================


class TestUnitListing:

    @pytest.mark.parametrize(
        "q",
        ["pixel", "SN-777", "35999", "512gb", "obsidian", "garansi toko", "singapore"],
    )
    def test_search_matches_each_column(self, client, auth_headers, db_session, q):
        db_session.add(make_unit(
            product_name="Pixel 8 Pro",
            serial_number="SN-777",
            imei="359990000000000",
            storage="512GB",
            color="Obsidian",
            warranty="Garansi Toko 1 Bulan",
            origin="Singapore",
        ))
        db_session.add(make_unit(serial_number="OTHER"))
        db_session.commit()

        resp = client.get("/api/units", query_string={"q": q}, headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json
        assert body["total"] == 1
        assert body["data"][0]["serial_number"] == "SN-777"

    def test_pagination(self, client, auth_headers, db_session):
        for i in range(15):
            db_session.add(make_unit(serial_number=f"SN{i:02d}"))
        db_session.commit()

        resp = client.get("/api/units?page=2&pageSize=10", headers=auth_headers)
        body = resp.json
        assert resp.status_code == 200
        assert len(body["data"]) == 5
        assert body["total"] == 15
        assert body["page"] == 2
        assert body["pageSize"] == 10

    def test_page_size_is_clamped(self, client, auth_headers, db_session):
        resp = client.get("/api/units?pageSize=500", headers=auth_headers)
        assert resp.json["pageSize"] == 100

        resp = client.get("/api/units?pageSize=0", headers=auth_headers)
        assert resp.json["pageSize"] == 1

    def test_status_and_date_filters(self, client, auth_headers, db_session):
        db_session.add(make_unit(serial_number="A", intake_date=date(2024, 1, 1)))
        db_session.add(make_unit(serial_number="B", intake_date=date(2024, 1, 31), status="SOLD"))
        db_session.add(make_unit(serial_number="C", intake_date=date(2024, 2, 1)))
        db_session.commit()

        resp = client.get("/api/units?status=SOLD", headers=auth_headers)
        assert [u["serial_number"] for u in resp.json["data"]] == ["B"]

        resp = client.get("/api/units?status=all&from=2024-01-01&to=2024-01-31", headers=auth_headers)
        assert resp.json["total"] == 2

    def test_bad_filters(self, client, auth_headers, db_session):
        assert client.get("/api/units?status=LOST", headers=auth_headers).status_code == 400
        assert client.get("/api/units?from=01-02-2024", headers=auth_headers).status_code == 400
        assert client.get("/api/units?from=2024-03-01&to=2024-01-01", headers=auth_headers).status_code == 400

    def test_page_beyond_offset_range(self, client, auth_headers, db_session):
        resp = client.get("/api/units?page=99999999999999999999", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json == {"ok": False, "error": "page is too large"}

        resp = client.get("/api/sales?page=99999999999999999999", headers=auth_headers)
        assert resp.status_code == 400


# =============================================================================
# INTAKE / EDIT / DELETE
# =============================================================================


class TestUnitWrites:

    def test_create(self, client, auth_headers, db_session):
        resp = client.post("/api/units", json={
            "product_name": "Galaxy S24",
            "serial_number": "R5CX",
            "imei": "",
            "cost": "11500000",
            "intake_date": "2024-03-01",
        }, headers=auth_headers)

        assert resp.status_code == 201
        unit = resp.json["unit"]
        assert unit["status"] == "READY"
        assert unit["cost"] == 11_500_000
        assert unit["imei"] is None
        assert unit["intake_date"] == "2024-03-01"

    def test_create_requires_product_name(self, client, auth_headers, db_session):
        resp = client.post("/api/units", json={"serial_number": "X"}, headers=auth_headers)
        assert resp.status_code == 400
        assert "product_name" in resp.json["error"]

    def test_create_rejects_unknown_field(self, client, auth_headers, db_session):
        resp = client.post("/api/units", json={"product_name": "X", "id": 5}, headers=auth_headers)
        assert resp.status_code == 400

    def test_create_rejects_negative_cost(self, client, auth_headers, db_session):
        resp = client.post("/api/units", json={"product_name": "X", "cost": -1}, headers=auth_headers)
        assert resp.status_code == 400

    def test_duplicate_serial_conflicts(self, client, auth_headers, ready_unit):
        resp = client.post("/api/units", json={"product_name": "X", "serial_number": "SN1"}, headers=auth_headers)
        assert resp.status_code == 409

    def test_patch_null_keeps_value(self, client, auth_headers, ready_unit):
        resp = client.patch(f"/api/units/{ready_unit.id}", json={
            "color": "Blue",
            "storage": None,
        }, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json["unit"]["color"] == "Blue"
        assert resp.json["unit"]["storage"] == "128GB"

    def test_patch_status(self, client, auth_headers, ready_unit):
        resp = client.patch(f"/api/units/{ready_unit.id}", json={"status": "sold"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json["unit"]["status"] == "SOLD"

        resp = client.patch(f"/api/units/{ready_unit.id}", json={"status": "LOST"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_get_missing(self, client, auth_headers, db_session):
        assert client.get("/api/units/999", headers=auth_headers).status_code == 404
        assert client.patch("/api/units/999", json={"color": "x"}, headers=auth_headers).status_code == 404

    def test_delete_sold_conflicts(self, client, auth_headers, db_session):
        unit = make_unit(serial_number="SOLD1", status="SOLD")
        db_session.add(unit)
        db_session.commit()

        resp = client.delete(f"/api/units/{unit.id}", headers=auth_headers)
        assert resp.status_code == 409

    def test_delete_ready(self, client, auth_headers, ready_unit):
        unit_id = ready_unit.id
        resp = client.delete(f"/api/units/{unit_id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json == {"ok": True, "id": unit_id}
        assert client.get(f"/api/units/{unit_id}", headers=auth_headers).status_code == 404
