"""Tests for health endpoint."""

from fitchallenge.core.health import HealthCheckResult, HealthStatus, _aggregate_status


def test_health_returns_200(client):
    """Health endpoint returns 200."""
    r = client.get("/health")
    assert r.status_code in (200, 503)


def test_health_returns_expected_keys(client):
    """Health response contains expected structure."""
    r = client.get("/health")
    data = r.json()
    assert "status" in data
    assert "version" in data
    assert "checks" in data
    assert isinstance(data["checks"], list)
    assert {c["component"] for c in data["checks"]} == {"environment", "supabase"}


def _check(status):
    return HealthCheckResult(component="x", status=status)


def test_aggregate_status():
    assert _aggregate_status([_check(HealthStatus.OK), _check(HealthStatus.CRITICAL)]) == HealthStatus.CRITICAL
    assert _aggregate_status([_check(HealthStatus.OK), _check(HealthStatus.DEGRADED)]) == HealthStatus.DEGRADED
    assert _aggregate_status([_check(HealthStatus.NOT_CONFIGURED)]) == HealthStatus.NOT_CONFIGURED
    assert _aggregate_status([_check(HealthStatus.OK), _check(HealthStatus.NOT_CONFIGURED)]) == HealthStatus.OK
