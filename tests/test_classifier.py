"""JurisdictionClassifier 테스트"""

import itertools
import pytest
from decimal import Decimal

from crossborder_tax.core import InvoiceLine, JurisdictionClassifier, TransactionType


REGION_CODES = ['ESP', 'PRT', 'POL', 'DEU']
OUTSIDE_CODES = ['MEX', 'USA', 'GBR']


@pytest.fixture
def classifier(config) -> JurisdictionClassifier:
    return JurisdictionClassifier(config)


class TestJurisdictionPredicates:
    """관할 판별"""

    @pytest.mark.parametrize('code', REGION_CODES + OUTSIDE_CODES)
    def test_same_jurisdiction_is_domestic(self, classifier, make_context, code):
        ctx = make_context(seller_jurisdiction_code=code, buyer_jurisdiction_code=code)

        assert not classifier.cross_border(ctx)
        assert not classifier.region_transaction(ctx)
        assert not classifier.export_transaction(ctx)
        assert classifier.classify(ctx).transaction_type is TransactionType.DOMESTIC

    @pytest.mark.parametrize('seller,buyer', [
        pair for pair in itertools.permutations(REGION_CODES, 2)
    ])
    def test_both_in_region(self, classifier, make_context, seller, buyer):
        ctx = make_context(seller_jurisdiction_code=seller, buyer_jurisdiction_code=buyer)

        assert classifier.cross_border(ctx)
        assert classifier.region_transaction(ctx)
        assert not classifier.export_transaction(ctx)

    @pytest.mark.parametrize('seller,buyer', [
        (region, outside) for region in REGION_CODES for outside in OUTSIDE_CODES
    ] + [
        (outside, region) for region in REGION_CODES for outside in OUTSIDE_CODES
    ])
    def test_one_side_outside_region(self, classifier, make_context, seller, buyer):
        ctx = make_context(seller_jurisdiction_code=seller, buyer_jurisdiction_code=buyer)

        assert classifier.export_transaction(ctx)
        assert not classifier.region_transaction(ctx)
        assert classifier.classify(ctx).transaction_type is TransactionType.EXPORT

    def test_both_outside_region_is_export(self, classifier, make_context):
        ctx = make_context(seller_jurisdiction_code='USA', buyer_jurisdiction_code='MEX')
        assert classifier.export_transaction(ctx)

    def test_codes_are_normalized(self, classifier, make_context):
        """관할 코드는 대문자로 정규화"""
        ctx = make_context(seller_jurisdiction_code=' esp ', buyer_jurisdiction_code='Prt')
        assert classifier.region_transaction(ctx)


class TestDigitalServices:
    """디지털 서비스 판별"""

    def test_from_product_types(self, classifier, make_context):
        ctx = make_context(product_types=frozenset({'digital_services'}))
        assert classifier.digital_services(ctx)

    def test_software_product_type(self, classifier, make_context):
        ctx = make_context(product_types=frozenset({'software'}))
        assert classifier.digital_services(ctx)

    def test_from_line_descriptions(self, classifier, make_context):
        ctx = make_context(invoice_lines=(
            InvoiceLine(description='Software subscription monthly', quantity=1, unit_price=Decimal('50')),
            InvoiceLine(description='SaaS platform access', quantity=1, unit_price=Decimal('100')),
        ))
        assert classifier.digital_services(ctx)

    @pytest.mark.parametrize('description', [
        'Annual MAINTENANCE contract',
        'Staff Training',
        'Video streaming bundle',
        'Technical support hours',
    ])
    def test_keywords_case_insensitive(self, classifier, make_context, description):
        ctx = make_context(invoice_lines=(
            InvoiceLine(description=description, quantity=1, unit_price=Decimal('10')),
        ))
        assert classifier.digital_services(ctx)

    def test_physical_goods(self, classifier, make_context):
        ctx = make_context(invoice_lines=(
            InvoiceLine(description='Physical product', quantity=1, unit_price=Decimal('50')),
            InvoiceLine(description='Hardware component', quantity=1, unit_price=Decimal('100')),
        ))
        assert not classifier.digital_services(ctx)

    def test_no_lines(self, classifier, make_context):
        ctx = make_context(invoice_lines=())
        assert not classifier.digital_services(ctx)
