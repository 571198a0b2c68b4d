"""API 엔드포인트 통합 테스트"""

import pytest
from fastapi.testclient import TestClient

from crossborder_tax.api.main import app
from crossborder_tax.api.routers.tax import get_report_cache
from crossborder_tax.core import ReportCache, RuleEngine


@pytest.fixture
def client(config):
    """테스트마다 새 캐시 사용"""
    cache = ReportCache(RuleEngine(config), ttl_seconds=300)
    app.dependency_overrides[get_report_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def _transaction(**overrides) -> dict:
    data = {
        'seller_jurisdiction_code': 'ESP',
        'buyer_jurisdiction_code': 'PRT',
        'seller_establishment': '1',
        'buyer_location': 'Lisbon',
        'transaction_amount': 5000,
        'product_types': ['goods'],
        'buyer_type': 'business',
        'invoice_lines': [
            {'description': 'Industrial equipment', 'quantity': 2, 'unit_price': 2500}
        ],
        'transaction_date': '2024-06-01',
    }
    data.update(overrides)
    return {'transaction': data}


class TestHealth:
    """기본 엔드포인트"""

    def test_root(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert response.json()['docs'] == '/docs'

    def test_health(self, client):
        response = client.get('/health')
        assert response.json() == {'status': 'healthy'}


class TestValidateCrossBorder:
    """POST /api/v1/tax/validate_cross_border"""

    def test_region_business(self, client):
        response = client.post('/api/v1/tax/validate_cross_border', json=_transaction())
        assert response.status_code == 200

        data = response.json()
        results = data['validation_results']
        assert results['reverse_charge']['required'] is True
        assert results['tax_exemption']['applicable'] is True
        assert results['transaction_type']['type'] == 'intra_region'
        assert results['summary'] == data['summary']
        assert 'Valid VAT number verification' in data['required_documents']
        assert data['summary']['status'] == 'warning'
        assert data['rule_version'] == '2024.1'

    def test_amount_computed_from_lines(self, client):
        """금액/상품 유형/구매자 유형을 생략하면 송장 데이터로 추정"""
        payload = _transaction(
            transaction_amount=None,
            product_types=None,
            buyer_type=None,
            buyer_kind='contact',
            buyer_name='John Doe',
            invoice_lines=[{'description': 'Software subscription', 'quantity': 1, 'unit_price': 500}],
        )
        response = client.post('/api/v1/tax/validate_cross_border', json=payload)
        assert response.status_code == 200

        results = response.json()['validation_results']
        assert results['oss_requirement']['required'] is True
        assert results['distance_selling']['threshold'] == 35000
        assert 'digital_vat_location' in results

    def test_export_high_value(self, client):
        payload = _transaction(buyer_jurisdiction_code='MEX', transaction_amount=15000)
        data = client.post('/api/v1/tax/validate_cross_border', json=payload).json()

        assert data['validation_results']['export_exemption']['applicable'] is True
        assert 'Local tax registration may be required in MEX' in \
            data['validation_results']['tax_registration']['requirements']
        assert 'Customer identification documents' in data['required_documents']

    def test_invalid_buyer_type(self, client):
        response = client.post(
            '/api/v1/tax/validate_cross_border',
            json=_transaction(buyer_type='reseller')
        )
        assert response.status_code == 400
        assert 'buyer_type' in response.json()['detail']

    def test_negative_amount(self, client):
        response = client.post(
            '/api/v1/tax/validate_cross_border',
            json=_transaction(transaction_amount=-1)
        )
        assert response.status_code == 422

    def test_missing_jurisdiction(self, client):
        payload = _transaction()
        del payload['transaction']['seller_jurisdiction_code']
        response = client.post('/api/v1/tax/validate_cross_border', json=payload)
        assert response.status_code == 422


class TestJurisdictions:
    """GET /api/v1/tax/jurisdictions"""

    def test_list(self, client):
        data = client.get('/api/v1/tax/jurisdictions').json()

        assert data['supported_jurisdictions'] == ['ESP', 'MEX', 'POL', 'PRT']
        assert 'DEU' in data['region_members']
        assert data['rule_version'] == '2024.1'
        assert data['effective_date'] == '2024-01-01'


class TestCacheStats:
    """GET /api/v1/tax/cache_stats"""

    def test_counts_hits(self, client):
        client.post('/api/v1/tax/validate_cross_border', json=_transaction())
        client.post('/api/v1/tax/validate_cross_border', json=_transaction())

        data = client.get('/api/v1/tax/cache_stats').json()
        assert data['hits'] == 1
        assert data['misses'] == 1
        assert data['hit_rate'] == 0.5
        assert data['size'] == 1
