"""공통 테스트 픽스처"""

import pytest
from datetime import date
from decimal import Decimal

from crossborder_tax.core import (
    BuyerType,
    InvoiceLine,
    RuleEngine,
    TaxRuleConfig,
    TransactionContext,
)
from crossborder_tax.core.rule_config import DEFAULT_RULES_FILE


# 모든 테스트는 거래일을 고정
PINNED_DATE = date(2024, 6, 1)


@pytest.fixture(scope="session")
def config() -> TaxRuleConfig:
    """패키지 기본 규칙"""
    return TaxRuleConfig.from_yaml(DEFAULT_RULES_FILE)


@pytest.fixture
def engine(config) -> RuleEngine:
    return RuleEngine(config)


@pytest.fixture
def make_context():
    """기본 거래(ESP -> ESP, 사업자, 상품)에서 일부 필드만 바꾼 컨텍스트 생성"""

    def _make(**overrides) -> TransactionContext:
        data = {
            'seller_jurisdiction_code': 'ESP',
            'buyer_jurisdiction_code': 'ESP',
            'seller_establishment': '1',
            'buyer_location': 'Madrid',
            'transaction_amount': Decimal('1000'),
            'product_types': frozenset({'goods'}),
            'buyer_type': BuyerType.BUSINESS,
            'invoice_lines': (
                InvoiceLine(description='Industrial equipment', quantity=1, unit_price=Decimal('1000')),
            ),
            'transaction_date': PINNED_DATE,
        }
        data.update(overrides)
        return TransactionContext(**data)

    return _make
