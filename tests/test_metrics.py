from fastapi.testclient import TestClient

from contapyme.api.main import app


def test_metrics_endpoint_available():
    client = TestClient(app)
    resp = client.get("/metrics")
    assert resp.status_code == 200
    text = resp.text
    assert "f29_filings_computed_total" in text
    assert "f22_filings_computed_total" in text
    assert 'filings_marked_filed_total' in text
    assert "settlements_generated_total" in text
    assert "transactions_reversed_total" in text
    assert "low_stock_alerts_total" in text
