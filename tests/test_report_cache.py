"""ReportCache 테스트"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from crossborder_tax.core import ReportCache, fingerprint, reverse_charge_required


NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def cache(engine) -> ReportCache:
    return ReportCache(engine, ttl_seconds=300, max_size=2)


class TestFingerprint:
    """캐시 키"""

    def test_amount_rounded(self, make_context):
        assert fingerprint(make_context(transaction_amount=Decimal('1000.2'))) == \
            fingerprint(make_context(transaction_amount=Decimal('999.8')))

    def test_product_type_order_irrelevant(self, make_context):
        a = make_context(product_types=['goods', 'software'])
        b = make_context(product_types=['software', 'goods'])
        assert fingerprint(a) == fingerprint(b)

    @pytest.mark.parametrize('overrides', [
        {'buyer_jurisdiction_code': 'PRT'},
        {'buyer_type': 'consumer'},
        {'transaction_amount': Decimal('2000')},
        {'transaction_date': date(2024, 6, 2)},
    ])
    def test_relevant_fields_change_key(self, make_context, overrides):
        assert fingerprint(make_context()) != fingerprint(make_context(**overrides))


class TestReportCache:
    """TTL + LRU 캐시"""

    def test_hit(self, cache, make_context):
        ctx = make_context()
        first = cache.validate(ctx, now=NOW)
        second = cache.validate(ctx, now=NOW + timedelta(seconds=10))

        assert second is first
        assert cache.stats().hits == 1
        assert cache.stats().misses == 1
        assert cache.stats().hit_rate == 0.5

    def test_expired(self, cache, make_context):
        ctx = make_context()
        first = cache.validate(ctx, now=NOW)
        second = cache.validate(ctx, now=NOW + timedelta(seconds=300))

        assert second is not first
        assert second == first
        assert cache.stats().misses == 2
        assert cache.stats().evictions == 1

    def test_lru_eviction(self, cache, make_context):
        a = make_context(buyer_jurisdiction_code='PRT')
        b = make_context(buyer_jurisdiction_code='MEX')
        c = make_context(buyer_jurisdiction_code='POL')

        cache.validate(a, now=NOW)
        cache.validate(b, now=NOW)
        cache.validate(a, now=NOW)  # a를 최근 사용으로
        cache.validate(c, now=NOW)

        assert len(cache) == 2
        assert cache.get(a, NOW) is not None
        assert cache.get(b, NOW) is None

    def test_cached_report_not_altered_by_caller(self, cache, make_context):
        """한 호출자가 보고서를 바꾸려 해도 이후 캐시 적중 결과는 그대로"""
        ctx = make_context(buyer_jurisdiction_code='PRT')
        first = cache.validate(ctx, now=NOW)

        with pytest.raises(TypeError):
            del first.results['reverse_charge']

        second = cache.validate(ctx, now=NOW)
        assert reverse_charge_required(second)

    def test_clear(self, cache, make_context):
        cache.validate(make_context(), now=NOW)
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize('kwargs', [{'ttl_seconds': 0}, {'max_size': 0}])
    def test_invalid_settings(self, engine, kwargs):
        with pytest.raises(ValueError):
            ReportCache(engine, **kwargs)
