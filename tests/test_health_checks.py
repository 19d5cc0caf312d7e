"""
Tests for health check endpoints
"""
import pytest
import time
import psutil
from unittest.mock import Mock, patch
from health_checks import (
    get_system_metrics,
    get_uptime,
    check_ai_services,
    check_database,
    SERVICE_NAME,
)


@pytest.mark.unit
class TestSystemMetrics:
    """Tests for system metrics collection"""

    def test_system_metrics_has_cpu_and_memory(self):
        """Test system metrics include CPU and memory"""
        metrics = get_system_metrics()
        assert isinstance(metrics['cpu_percent'], (int, float))
        assert 'memory_mb' in metrics
        assert 'memory_percent' in metrics
        assert metrics['threads'] >= 1

    @patch('health_checks.psutil.Process')
    def test_system_metrics_handles_errors(self, mock_process):
        """Test that get_system_metrics handles errors gracefully"""
        mock_process.side_effect = psutil.AccessDenied()
        assert get_system_metrics() == {}


@pytest.mark.unit
class TestUptime:
    """Tests for uptime calculation"""

    def test_uptime_has_required_fields(self):
        """Test that uptime includes all required fields"""
        uptime = get_uptime()
        assert set(uptime) == {'uptime_seconds', 'uptime_minutes', 'uptime_hours', 'started_at'}
        assert uptime['uptime_seconds'] >= 0

    def test_uptime_increases_over_time(self):
        """Test that uptime increases over time"""
        uptime1 = get_uptime()
        time.sleep(0.1)
        uptime2 = get_uptime()
        assert uptime2['uptime_seconds'] > uptime1['uptime_seconds']


@pytest.mark.unit
class TestDependencyChecks:
    """Tests for AI and database checks"""

    def test_ai_configured(self):
        """Test the AI check reports a configured service"""
        app = Mock()
        app.ai_service.is_available.return_value = True
        assert check_ai_services(app) == {'anthropic_claude': True}
        app.ai_service.is_available.assert_called_once_with('claude')

    def test_ai_missing(self):
        """Test the AI check reports a missing service"""
        app = Mock(spec=[])
        assert check_ai_services(app) == {'anthropic_claude': False}

    @patch('health_checks.check_db_connection')
    def test_database_down(self, mock_check):
        """Test the database check reports an outage"""
        mock_check.side_effect = RuntimeError('Cannot connect to database: refused')
        assert check_database() == {'healthy': False, 'error': 'Cannot connect to database: refused'}


@pytest.mark.integration
class TestHealthCheckEndpoints:
    """Integration tests against the full app on in-memory SQLite"""

    def test_health_endpoint(self, client):
        """Test the health endpoint"""
        response = client.get('/api/health')
        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['service'] == SERVICE_NAME
        assert 'timestamp' in data

    def test_ping_endpoint_returns_pong(self, client):
        """Test that /ping endpoint returns 'pong'"""
        response = client.get('/api/ping')
        assert response.status_code == 200
        assert response.data == b'pong'

    def test_ready_with_database(self, client):
        """Test readiness with a reachable database"""
        response = client.get('/api/ready')
        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'ready'
        assert data['checks']['database'] == {'healthy': True}
        assert data['checks']['ai_services'] == {'anthropic_claude': False}

    @patch('health_checks.check_db_connection')
    def test_not_ready_without_database(self, mock_check, client):
        """Test readiness returns 503 without a database"""
        mock_check.side_effect = RuntimeError('Cannot connect to database: gone')
        response = client.get('/api/ready')
        assert response.status_code == 503
        assert response.get_json()['status'] == 'not_ready'

    def test_metrics_endpoint(self, client):
        """Test the metrics endpoint"""
        response = client.get('/api/metrics')
        assert response.status_code == 200
        data = response.get_json()
        assert 'uptime_seconds' in data['uptime']
        assert data['version']
        assert data['services'] == {'anthropic_claude': False}
