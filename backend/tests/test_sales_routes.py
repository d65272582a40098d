"""
Sales ledger API tests.

Verifies:
- Status codes for the record / edit / delete flows
- Salesperson comes from the logged-in user
- History filters and the summary endpoint
"""

from datetime import date

import pytest

from gadgetdesk.services import inventory_service, sales_service
from gadgetdesk.validation import NotFoundError

from conftest import make_accessory, make_unit, sale_payload


# =============================================================================
# RECORD
# =============================================================================


class TestRecordSale:

    def test_unit_sale(self, client, auth_headers, ready_unit):
        resp = client.post("/api/sales", json=sale_payload(), headers=auth_headers)

        assert resp.status_code == 201
        body = resp.json
        assert body["profit"] == 1_000_000
        assert body["inventory_synced"] is True
        assert body["sale"]["salesperson"] == "Rina Kasir"
        assert body["sale"]["cost_snapshot"] == 8_000_000

        unit = client.get(f"/api/units/{ready_unit.id}", headers=auth_headers).json["data"]
        assert unit["status"] == "SOLD"

    def test_second_sale_conflicts(self, client, auth_headers, ready_unit):
        client.post("/api/sales", json=sale_payload(), headers=auth_headers)
        resp = client.post("/api/sales", json=sale_payload(invoice_id="INV-002"), headers=auth_headers)

        assert resp.status_code == 409
        assert client.get("/api/sales", headers=auth_headers).json["total"] == 1

    def test_unknown_reference(self, client, auth_headers, ready_unit):
        resp = client.post("/api/sales", json=sale_payload(reference_key="GHOST"), headers=auth_headers)

        assert resp.status_code == 400
        assert client.get("/api/sales", headers=auth_headers).json["total"] == 0

    def test_bad_kind(self, client, auth_headers, ready_unit):
        resp = client.post("/api/sales", json=sale_payload(kind="unit"), headers=auth_headers)
        assert resp.status_code == 400

    def test_sell_price_must_be_positive(self, client, auth_headers, ready_unit):
        resp = client.post("/api/sales", json=sale_payload(sell_price=0), headers=auth_headers)
        assert resp.status_code == 400

    def test_missing_fields(self, client, auth_headers, ready_unit):
        resp = client.post("/api/sales", json={"kind": "UNIT"}, headers=auth_headers)
        assert resp.status_code == 400
        assert "invoice_id" in resp.json["error"]

    def test_client_cannot_set_profit(self, client, auth_headers, ready_unit):
        resp = client.post("/api/sales", json=sale_payload(profit=1), headers=auth_headers)
        assert resp.status_code == 400

    def test_accessory_out_of_stock(self, client, auth_headers, db_session):
        db_session.add(make_accessory(sku="AC0", quantity=0))
        db_session.commit()

        resp = client.post("/api/sales", json=sale_payload(
            kind="AKSESORIS", reference_key="AC0", product_name="Case", sell_price=80_000,
        ), headers=auth_headers)
        assert resp.status_code == 409


# =============================================================================
# EDIT / DELETE
# =============================================================================


class TestEditSale:

    def test_patch_mutable_fields(self, client, auth_headers, ready_unit):
        sale_id = client.post("/api/sales", json=sale_payload(), headers=auth_headers).json["id"]

        resp = client.patch(f"/api/sales/{sale_id}", json={
            "sell_price": 9_200_000,
            "referral": "TikTok",
            "buyer_name": None,
        }, headers=auth_headers)

        assert resp.status_code == 200
        sale = resp.json["sale"]
        assert sale["sell_price"] == 9_200_000
        assert sale["referral"] == "TikTok"
        assert sale["buyer_name"] == "Budi"
        assert sale["profit"] == 1_000_000

    def test_patch_frozen_field_rejected(self, client, auth_headers, ready_unit):
        sale_id = client.post("/api/sales", json=sale_payload(), headers=auth_headers).json["id"]

        resp = client.patch(f"/api/sales/{sale_id}", json={"reference_key": "SN2"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_patch_missing(self, client, auth_headers, db_session):
        resp = client.patch("/api/sales/999", json={"referral": "x"}, headers=auth_headers)
        assert resp.status_code == 404


class TestDeleteSale:

    def test_delete_restores_unit(self, client, auth_headers, ready_unit):
        sale_id = client.post("/api/sales", json=sale_payload(), headers=auth_headers).json["id"]

        resp = client.delete(f"/api/sales/{sale_id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json == {"ok": True, "id": sale_id, "inventory_synced": True}

        unit = client.get(f"/api/units/{ready_unit.id}", headers=auth_headers).json["data"]
        assert unit["status"] == "READY"
        assert client.get(f"/api/sales/{sale_id}", headers=auth_headers).status_code == 404

    def test_delete_missing(self, client, auth_headers, db_session):
        assert client.delete("/api/sales/999", headers=auth_headers).status_code == 404


# =============================================================================
# HISTORY
# =============================================================================


class TestSalesHistory:

    def _record_accessory_sales(self, client, auth_headers):
        for invoice, day, buyer in (("INV-1", "2024-01-10", "Andi"), ("INV-2", "2024-02-10", "Sari")):
            resp = client.post("/api/sales", json=sale_payload(
                invoice_id=invoice,
                kind="AKSESORIS",
                reference_key="AC1",
                product_name="Silicone Case",
                sale_date=day,
                sell_price=80_000,
                buyer_name=buyer,
            ), headers=auth_headers)
            assert resp.status_code == 201

    def test_search_and_dates(self, client, auth_headers, case_stock):
        self._record_accessory_sales(client, auth_headers)

        resp = client.get("/api/sales?q=sari", headers=auth_headers)
        assert [s["invoice_id"] for s in resp.json["data"]] == ["INV-2"]

        resp = client.get("/api/sales?q=rina", headers=auth_headers)
        assert resp.json["total"] == 2

        resp = client.get("/api/sales?from=2024-01-01&to=2024-01-31", headers=auth_headers)
        assert [s["invoice_id"] for s in resp.json["data"]] == ["INV-1"]

    def test_summary(self, client, auth_headers, case_stock):
        self._record_accessory_sales(client, auth_headers)

        resp = client.get("/api/sales/summary?from=2024-02-01", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json["data"] == {"count": 1, "revenue": 80_000, "cost": 50_000, "profit": 30_000}

    def test_status_param_is_ignored(self, client, auth_headers, case_stock):
        self._record_accessory_sales(client, auth_headers)

        resp = client.get("/api/sales?status=LOST", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json["total"] == 2

    @pytest.mark.parametrize(
        "q",
        ["inv-77", "pixel watch", "pw-serial-9", "yohana", "dewi penjual", "shopee live"],
    )
    def test_search_matches_each_column(self, client, auth_headers, db_session, q):
        db_session.add(make_unit(serial_number="PW-SERIAL-9", product_name="Pixel Watch 2"))
        db_session.commit()
        sales_service.record_sale({
            "invoice_id": "INV-77",
            "kind": "UNIT",
            "reference_key": "PW-SERIAL-9",
            "sale_date": date(2024, 4, 1),
            "product_name": "Pixel Watch 2",
            "sell_price": 4_000_000,
            "buyer_name": "Yohana",
            "referral": "Shopee Live",
        }, salesperson="Dewi Penjual")
        db_session.add(make_accessory(sku="AC-X"))
        db_session.commit()
        sales_service.record_sale({
            "invoice_id": "INV-01",
            "kind": "AKSESORIS",
            "reference_key": "AC-X",
            "sale_date": date(2024, 4, 1),
            "product_name": "Silicone Case",
            "sell_price": 80_000,
        }, salesperson="Rina Kasir")

        resp = client.get("/api/sales", query_string={"q": q}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json["total"] == 1
        assert resp.json["data"][0]["invoice_id"] == "INV-77"


class TestInventoryRace:

    def test_row_gone_before_lock_is_400(self, client, auth_headers, ready_unit, monkeypatch):
        def vanished(key, *, commit=True):
            raise NotFoundError(f"Serial/IMEI {key} not found")

        monkeypatch.setattr(inventory_service, "mark_sold", vanished)

        resp = client.post("/api/sales", json=sale_payload(), headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json["ok"] is False
        assert client.get("/api/sales", headers=auth_headers).json["total"] == 0
