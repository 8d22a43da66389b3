from datetime import date

import pytest

from hotel_loyalty.core.errors import UpstreamError
from hotel_loyalty.core.rate_limit import FixedWindowRateLimiter
from hotel_loyalty.models import BonusBalance
from hotel_loyalty.services.guests import GuestStore

CHECKOUT = {
    "guest_phone": "8 (999) 123-45-67",
    "last_name": "Петрова",
    "first_name": "Анна",
    "checkin_date": "05.01.2024",
    "loyalty_level": "1 СЕЗОН",
    "shelter_booking_id": "SH-42",
    "total_amount": 25000,
    "bonus_spent": 500,
}


@pytest.fixture
def balances(db):
    db.add_all(
        [
            BonusBalance(
                phone="9991234567", last_name="Петрова", first_name="Анна",
                loyalty_level="1 сезон", bonus_balances=100, visits_total=1,
                last_date_visit=date(2023, 7, 1),
            ),
            BonusBalance(
                phone="9991234567", last_name="Петрова", first_name="Анна",
                loyalty_level="2 СЕЗОНА", bonus_balances=750.5, visits_total=2,
                last_date_visit=date(2024, 8, 15),
            ),
            BonusBalance(
                phone="9990000000", last_name="Орлов", first_name="Пётр",
                loyalty_level="4 сезона", bonus_balances=0, visits_total=9,
                last_date_visit=date(2024, 6, 1),
            ),
        ]
    )
    db.commit()


class TestBonusSearch:
    def test_found_guest_gets_next_tier(self, client, balances):
        resp = client.get("/bonuses/search", params={"phone": "+7 (999) 123-45-67"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"] == {
            "guest_phone": "9991234567",
            "last_name": "Петрова",
            "first_name": "Анна",
            "loyalty_level": "3 СЕЗОНА",
            "current_balance": 750.5,
            "visits_count": 2,
            "last_visit_date": "2024-08-15",
        }

    def test_top_tier_stays(self, client, balances):
        resp = client.get("/bonuses/search", params={"phone": "9990000000"})
        assert resp.json()["data"]["loyalty_level"] == "4 СЕЗОНА"

    def test_new_guest_is_null(self, client, balances):
        resp = client.get("/bonuses/search", params={"phone": "+7 900 000-00-01"})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": None}

    def test_missing_phone(self, client):
        resp = client.get("/bonuses/search")
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_short_phone(self, client):
        resp = client.get("/bonuses/search", params={"phone": "12345"})
        assert resp.status_code == 400

    def test_list_balances(self, client, balances):
        resp = client.get("/bonuses")
        assert resp.status_code == 200
        dates = [row["last_date_visit"] for row in resp.json()["data"]]
        assert dates == ["2024-08-15", "2024-06-01", "2023-07-01"]

    def test_database_error_redacted(self, client, monkeypatch):
        def boom(self, phone):
            raise UpstreamError("Ошибка при поиске гостя", detail="connection refused")

        monkeypatch.setattr(GuestStore, "find_latest_balance", boom)
        resp = client.get("/bonuses/search", params={"phone": "9991234567"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Ошибка при поиске гостя"}

    def test_database_error_detail_in_development(self, make_client, monkeypatch):
        def boom(self, phone):
            raise UpstreamError("Ошибка при поиске гостя", detail="connection refused")

        monkeypatch.setattr(GuestStore, "find_latest_balance", boom)
        client = make_client(environment="development")
        resp = client.get("/bonuses/search", params={"phone": "9991234567"})
        assert resp.status_code == 500
        assert resp.json()["message"] == "connection refused"


class TestGuests:
    def test_create_checkout(self, client):
        resp = client.post("/guests", json=CHECKOUT)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "✅ Данные гостя успешно добавлены!"
        assert body["data"]["guest_phone"] == "9991234567"
        assert body["data"]["checkin_date"] == "2024-01-05"
        assert body["data"]["total_amount"] == 25000
        assert body["data"]["bonus_spent"] == 500

    def test_checkout_is_append_only(self, client):
        client.post("/guests", json=CHECKOUT)
        client.post("/guests", json=dict(CHECKOUT, shelter_booking_id="SH-43"))
        rows = client.get("/guests").json()["data"]
        assert len(rows) == 2
        assert {r["shelter_booking_id"] for r in rows} == {"SH-42", "SH-43"}

    @pytest.mark.parametrize(
        "override",
        [
            {"total_amount": 0},
            {"total_amount": 1_000_001},
            {"shelter_booking_id": "X" * 81},
            {"checkin_date": "13-13-2024"},
            {"guest_phone": "12345"},
            {"bonus_spent": 2_000_000},
        ],
    )
    def test_validation_errors(self, client, override):
        resp = client.post("/guests", json=dict(CHECKOUT, **override))
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert client.get("/guests").json()["data"] == []

    def test_malformed_body(self, client):
        resp = client.post("/guests", content=b"not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400


class TestAdmission:
    def test_unknown_origin_refused(self, client):
        resp = client.get("/config", headers={"Origin": "https://evil.com"})
        assert resp.status_code == 403
        assert resp.json()["success"] is False
        assert "access-control-allow-origin" not in resp.headers

    def test_allowed_origin_gets_cors_headers(self, client):
        resp = client.get("/config", headers={"Origin": "https://usadba4.ru"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://usadba4.ru"
        assert resp.headers["access-control-allow-credentials"] == "true"

    def test_wildcard_origin(self, make_client):
        from hotel_loyalty.core.origins import DEFAULT_ALLOWED_ORIGINS, OriginPolicy

        policy = OriginPolicy.from_lists(DEFAULT_ALLOWED_ORIGINS, ["https://*.usadba4.ru"])
        client = make_client(origins=policy)
        assert client.get("/config", headers={"Origin": "https://foo.usadba4.ru"}).status_code == 200
        assert client.get("/config", headers={"Origin": "https://usadba4.ru.evil.com"}).status_code == 403

    def test_preflight(self, client):
        headers = {"Access-Control-Request-Method": "POST"}
        ok = client.options("/auth", headers=dict(headers, Origin="http://localhost:5173"))
        assert ok.status_code == 200
        denied = client.options("/auth", headers=dict(headers, Origin="https://evil.com"))
        assert denied.status_code == 403

    def test_rate_limit_window(self, make_client, clock):
        limiter = FixedWindowRateLimiter(limit=2, window=60, clock=clock)
        client = make_client(limiter=limiter)

        assert client.get("/config").status_code == 200
        second = client.get("/config")
        assert second.status_code == 200
        assert second.headers["ratelimit-remaining"] == "0"

        third = client.get("/config")
        assert third.status_code == 429
        assert third.headers["retry-after"] == "60"
        assert third.json()["success"] is False

        clock.advance(60)
        assert client.get("/config").status_code == 200

    def test_rate_limit_per_forwarded_client(self, make_client, clock):
        limiter = FixedWindowRateLimiter(limit=1, window=60, clock=clock)
        client = make_client(limiter=limiter)

        assert client.get("/config", headers={"X-Forwarded-For": "203.0.113.1"}).status_code == 200
        assert client.get("/config", headers={"X-Forwarded-For": "203.0.113.1"}).status_code == 429
        assert client.get("/config", headers={"X-Forwarded-For": "203.0.113.2"}).status_code == 200

    def test_security_headers(self, client):
        resp = client.get("/config")
        assert resp.headers["x-content-type-options"] == "nosniff"
        assert resp.headers["x-frame-options"] == "SAMEORIGIN"


class TestSystem:
    def test_config(self, client):
        assert client.get("/config").json() == {"authDisabled": False}

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["database"] == "Connected"
        assert body["uptime"] >= 0

    def test_health_database_down(self, client, monkeypatch):
        def boom(self):
            raise UpstreamError("База данных недоступна", detail="timeout")

        monkeypatch.setattr(GuestStore, "ping", boom)
        resp = client.get("/health")
        assert resp.status_code == 500
        assert resp.json() == {"status": "❌ ERROR", "error": "База данных недоступна"}

    def test_metrics(self, client):
        client.get("/config")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "loyalty_api_http_request_duration_seconds_bucket" in resp.text
        assert 'route="/config"' in resp.text
        assert 'route="/metrics"' not in resp.text

    def test_metrics_unmatched_paths_share_one_series(self, client):
        for i in range(3):
            assert client.get(f"/scan/{i}").status_code == 404
        text = client.get("/metrics").text
        assert 'route="unmatched"' in text
        assert "/scan/" not in text

    def test_not_found(self, client):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not Found"}

    def test_wrong_method_is_not_found(self, client):
        assert client.post("/bonuses/search").status_code == 404

    def test_static_frontend(self, make_client, tmp_path):
        (tmp_path / "index.html").write_text("<h1>loyalty</h1>", encoding="utf-8")
        client = make_client(static_dir=tmp_path)
        resp = client.get("/app/")
        assert resp.status_code == 200
        assert "loyalty" in resp.text
