"""송장 데이터로부터 거래 컨텍스트 생성

송장 라인의 할인 후 금액 합계, 설명 기반 상품 유형 추론,
구매자 유형 추정 등 호출 측 경계 처리를 담당합니다.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Set

from .models import BuyerType, InvoiceLine, TransactionContext


CENT = Decimal("0.01")

DIGITAL_KEYWORDS = ('software', 'license', 'subscription', 'saas', 'digital', 'download', 'streaming')
SERVICE_KEYWORDS = ('consulting', 'training', 'support', 'maintenance', 'service')
EDUCATION_KEYWORDS = ('training', 'education', 'course', 'workshop', 'seminar')

# 연락처 이름에 포함되면 사업자로 간주
BUSINESS_INDICATORS = ('ltd', 'llc', 'inc', 'corp', 'gmbh', 'sarl', 's.l.', 'lda', 'sa')


def usable_lines(lines: Iterable[Any]) -> List[InvoiceLine]:
    """설명이 없거나 수량/단가가 0 이하인 라인 제외"""
    result = []
    for line in lines:
        if isinstance(line, dict):
            line = InvoiceLine.from_dict(line)
        if line.description.strip() and line.quantity > 0 and line.unit_price > 0:
            result.append(line)
    return result


def calculate_transaction_amount(lines: Iterable[InvoiceLine]) -> Decimal:
    """라인별 할인 후 금액 합계 (센트 단위 반올림)"""
    total = sum((line.net_amount for line in lines), Decimal("0"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def infer_product_types(lines: Iterable[InvoiceLine]) -> Set[str]:
    """라인 설명으로 상품 유형 추론 (기본값 goods)"""
    product_types = {'goods'}

    for line in lines:
        description = line.description.lower()

        if any(keyword in description for keyword in DIGITAL_KEYWORDS):
            product_types.add('digital_services')
        if any(keyword in description for keyword in SERVICE_KEYWORDS):
            product_types.add('services')
        if any(keyword in description for keyword in EDUCATION_KEYWORDS):
            product_types.add('education')

    return product_types


def infer_buyer_type(buyer_kind: Optional[str], buyer_name: Optional[str] = None) -> BuyerType:
    """구매자 유형 추정

    회사는 항상 사업자, 연락처는 이름에 사업자 표지가 있을 때만 사업자로 봅니다.

    Args:
        buyer_kind: "company" 또는 "contact"
        buyer_name: 연락처 표시 이름

    Returns:
        BuyerType
    """
    if buyer_kind == 'contact':
        name = (buyer_name or "").lower()
        if any(indicator in name for indicator in BUSINESS_INDICATORS):
            return BuyerType.BUSINESS
        return BuyerType.CONSUMER

    return BuyerType.BUSINESS


def build_context(
    seller_jurisdiction_code: str,
    buyer_jurisdiction_code: str,
    seller_establishment: str,
    invoice_lines: Iterable[Any],
    buyer_location: Optional[str] = None,
    buyer_type: Optional[Any] = None,
    buyer_kind: Optional[str] = None,
    buyer_name: Optional[str] = None,
    product_types: Optional[Iterable[str]] = None,
    transaction_date: Optional[date] = None
) -> TransactionContext:
    """송장 데이터로 TransactionContext 생성

    Args:
        seller_jurisdiction_code: 판매 사업장 관할
        buyer_jurisdiction_code: 구매자 관할
        seller_establishment: 판매 사업장 ID
        invoice_lines: 송장 라인 (InvoiceLine 또는 dict)
        buyer_location: 구매자 위치
        buyer_type: 명시된 구매자 유형 (없으면 buyer_kind/buyer_name으로 추정)
        buyer_kind: "company" 또는 "contact"
        buyer_name: 구매자 표시 이름
        product_types: 명시된 상품 유형 (없으면 라인 설명으로 추론)
        transaction_date: 거래일

    Returns:
        TransactionContext

    Raises:
        InvalidTransactionError: 입력 계약 위반
    """
    lines = usable_lines(invoice_lines)

    if product_types is None:
        product_types = infer_product_types(lines)
    if buyer_type is None:
        buyer_type = infer_buyer_type(buyer_kind, buyer_name)

    return TransactionContext(
        seller_jurisdiction_code=seller_jurisdiction_code,
        buyer_jurisdiction_code=buyer_jurisdiction_code,
        seller_establishment=seller_establishment,
        buyer_location=buyer_location or "",
        transaction_amount=calculate_transaction_amount(lines),
        product_types=frozenset(product_types),
        buyer_type=buyer_type,
        invoice_lines=tuple(lines),
        transaction_date=transaction_date,
    )


def context_from_dict(data: Dict[str, Any]) -> TransactionContext:
    """금액이 이미 계산된 딕셔너리로 컨텍스트 생성

    product_types / buyer_type이 없으면 build_context와 같은 방식으로 추정합니다.
    """
    lines = [
        InvoiceLine.from_dict(line) if isinstance(line, dict) else line
        for line in data.get('invoice_lines') or ()
    ]

    product_types = data.get('product_types')
    if product_types is None:
        product_types = infer_product_types(lines)

    buyer_type = data.get('buyer_type')
    if buyer_type is None:
        buyer_type = infer_buyer_type(data.get('buyer_kind'), data.get('buyer_name'))

    return TransactionContext(
        seller_jurisdiction_code=data.get('seller_jurisdiction_code'),
        buyer_jurisdiction_code=data.get('buyer_jurisdiction_code'),
        seller_establishment=data.get('seller_establishment'),
        buyer_location=data.get('buyer_location') or "",
        transaction_amount=data.get('transaction_amount'),
        product_types=frozenset(product_types),
        buyer_type=buyer_type,
        invoice_lines=tuple(lines),
        transaction_date=data.get('transaction_date'),
    )
