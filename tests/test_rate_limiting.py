"""
test_rate_limiting.py — slowapi limiter configuration

Called by: pytest
Depends on: compagnon/rate_limit.py
"""

from unittest.mock import AsyncMock, MagicMock, patch


def test_limiter_keyed_by_user():
    from compagnon.rate_limit import limiter, rate_key

    assert limiter._key_func is rate_key


def test_rate_key_prefers_session_user():
    from compagnon.rate_limit import rate_key

    request = MagicMock()
    request.scope = {"session": {"user_id": "user-001"}}
    assert rate_key(request) == "user:user-001"


def test_rate_key_anonymous_uses_address():
    from compagnon.rate_limit import rate_key

    request = MagicMock()
    request.scope = {}
    request.client.host = "10.0.0.7"
    assert rate_key(request) == "10.0.0.7"


def test_limiter_registered_on_app():
    from compagnon.main import app
    from compagnon.rate_limit import limiter

    assert app.state.limiter is limiter


def test_resolve_storage_no_redis():
    with patch("compagnon.rate_limit.settings") as mock_settings:
        mock_settings.redis_url = ""
        from compagnon.rate_limit import _resolve_storage

        assert _resolve_storage() is None


def test_resolve_storage_redis_unavailable():
    import redis as redis_lib

    with patch("compagnon.rate_limit.settings") as mock_settings:
        mock_settings.redis_url = "redis://localhost:6379/15"
        with patch.object(redis_lib, "from_url") as mock_from_url:
            mock_from_url.return_value.ping.side_effect = ConnectionError
            from compagnon.rate_limit import _resolve_storage

            assert _resolve_storage() is None


def test_resolve_storage_redis_ok():
    import redis as redis_lib

    with patch("compagnon.rate_limit.settings") as mock_settings:
        mock_settings.redis_url = "redis://localhost:6379/15"
        with patch.object(redis_lib, "from_url") as mock_from_url:
            mock_from_url.return_value.ping.return_value = True
            from compagnon.rate_limit import _resolve_storage

            assert _resolve_storage() == "redis://localhost:6379/15"


def test_refresh_allowed_under_limit(client):
    with patch("compagnon.services.tender_service.BoampConnector") as mock_cls:
        mock_cls.return_value.search = AsyncMock(return_value=[])
        for _ in range(3):
            assert client.post("/api/dashboard/refresh", json={}).status_code == 200
