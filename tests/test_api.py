"""
Integration tests for the ledger HTTP endpoints.
"""
from fiscal_ledger.models import ReceiptRecordModel

from factories import build_receipt


def _archive(client, total, merchant_id="M1", tx="tx-1"):
    resp = client.post(
        "/api/receipts",
        json={
            "transaction_id": tx,
            "merchant_id": merchant_id,
            "receipt": build_receipt(total, f"T-{tx}"),
        },
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestHealth:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestArchive:
    def test_archive_success(self, client):
        body = _archive(client, 10.0)
        assert body["chain_position"] == 1
        assert body["previous_hash"] == "GENESIS"
        assert len(body["content_hash"]) == 64
        assert len(body["signature"]) == 32

    def test_archive_links_chain(self, client):
        first = _archive(client, 10.0, tx="tx-1")
        second = _archive(client, 25.5, tx="tx-2")
        assert second["chain_position"] == 2
        assert second["previous_hash"] == first["content_hash"]

    def test_archive_rejects_incomplete_receipt(self, client):
        receipt = build_receipt(10.0)
        del receipt["total"]
        resp = client.post(
            "/api/receipts",
            json={"transaction_id": "tx-1", "merchant_id": "M1", "receipt": receipt},
        )
        assert resp.status_code == 422

    def test_list_in_chain_order(self, client):
        _archive(client, 10.0, tx="tx-1")
        _archive(client, 25.5, tx="tx-2")
        _archive(client, 10.0, merchant_id="M2", tx="tx-3")
        resp = client.get("/api/receipts", params={"merchant_id": "M1"})
        assert resp.status_code == 200
        assert [r["chain_position"] for r in resp.json()] == [1, 2]

    def test_get_and_document(self, client):
        body = _archive(client, 99.99)
        resp = client.get(f"/api/receipts/{body['id']}")
        assert resp.status_code == 200
        assert resp.json()["content_hash"] == body["content_hash"]

        doc = client.get(f"/api/receipts/{body['id']}/document")
        assert doc.status_code == 200
        assert doc.headers["content-type"].startswith("text/html")
        assert body["content_hash"] in doc.text

    def test_get_not_found(self, client):
        assert client.get("/api/receipts/nonexistent").status_code == 404
        assert client.get("/api/receipts/nonexistent/document").status_code == 404


class TestVerify:
    def test_verify_valid(self, client):
        body = _archive(client, 10.0)
        resp = client.post(f"/api/receipts/{body['id']}/verify")
        assert resp.status_code == 200
        assert resp.json()["is_valid"] is True
        assert resp.json()["issues"] == []

    def test_verify_tampered(self, client, db):
        body = _archive(client, 99.99)
        row = db.get(ReceiptRecordModel, body["id"])
        row.structured_data = {**row.structured_data, "total": 9.99}
        db.commit()

        resp = client.post(f"/api/receipts/{body['id']}/verify")
        assert resp.json() == {
            "record_id": body["id"],
            "is_valid": False,
            "issues": ["hash mismatch"],
            "signature_valid": True,
        }

    def test_verify_not_found(self, client):
        assert client.post("/api/receipts/missing/verify").status_code == 404

    def test_chain_verify(self, client):
        _archive(client, 10.0, tx="tx-1")
        _archive(client, 25.5, tx="tx-2")
        resp = client.get("/api/merchants/M1/chain/verify")
        assert resp.json()["is_valid"] is True
        assert resp.json()["records_checked"] == 2


class TestMerchant:
    def test_audit_logs(self, client):
        body = _archive(client, 10.0)
        client.post(f"/api/receipts/{body['id']}/verify")
        logs = client.get("/api/merchants/M1/audit-logs").json()
        assert [e["action"] for e in logs] == ["create", "verify"]

    def test_stats(self, client):
        _archive(client, 10.0)
        stats = client.get("/api/merchants/M1/stats").json()
        assert stats["total_records"] == 1
        assert stats["latest_chain_position"] == 1

    def test_compliance(self, client):
        for i, total in enumerate([10.00, 25.50, 99.99], start=1):
            _archive(client, total, tx=f"tx-{i}")
        resp = client.get("/api/merchants/M1/compliance")
        assert resp.status_code == 200
        assert resp.json()["score"] == 100
        assert resp.json()["status"] == "compliant"

    def test_compliance_report(self, client):
        resp = client.get("/api/merchants/M1/compliance/report")
        assert resp.status_code == 200
        assert "Fiscal ledger compliance report" in resp.text
        assert "PARTIALLY COMPLIANT" in resp.text
