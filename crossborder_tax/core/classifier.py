"""JurisdictionClassifier: 거래 관할 분류"""

from dataclasses import dataclass

from .models import TransactionContext, TransactionType
from .rule_config import TaxRuleConfig


@dataclass(frozen=True)
class Classification:
    """거래 분류 결과

    지역 거래와 수출 거래는 동시에 참일 수 없습니다.
    지역 연합 밖의 미지원 관할은 실제 통관이 없더라도 수출로 분류됩니다.
    """

    cross_border: bool
    region_transaction: bool
    export_transaction: bool
    digital_services: bool

    @property
    def transaction_type(self) -> TransactionType:
        if self.region_transaction:
            return TransactionType.INTRA_REGION
        if self.export_transaction:
            return TransactionType.EXPORT
        return TransactionType.DOMESTIC


class JurisdictionClassifier:
    """거래 컨텍스트에 대한 순수 판별 함수 모음

    Attributes:
        config: 규칙 설정
    """

    def __init__(self, config: TaxRuleConfig):
        self.config = config

    def cross_border(self, ctx: TransactionContext) -> bool:
        return ctx.seller_jurisdiction_code != ctx.buyer_jurisdiction_code

    def region_transaction(self, ctx: TransactionContext) -> bool:
        return self.cross_border(ctx) and self._both_in_region(ctx)

    def export_transaction(self, ctx: TransactionContext) -> bool:
        return self.cross_border(ctx) and not self._both_in_region(ctx)

    def digital_services(self, ctx: TransactionContext) -> bool:
        """디지털 서비스 여부

        상품 유형 또는 송장 라인 설명(대소문자 무시)의 키워드로 판별합니다.
        """
        if ctx.product_types & self.config.digital_product_types:
            return True

        for line in ctx.invoice_lines:
            description = line.description.lower()
            if any(keyword in description for keyword in self.config.digital_service_keywords):
                return True

        return False

    def classify(self, ctx: TransactionContext) -> Classification:
        return Classification(
            cross_border=self.cross_border(ctx),
            region_transaction=self.region_transaction(ctx),
            export_transaction=self.export_transaction(ctx),
            digital_services=self.digital_services(ctx),
        )

    def _both_in_region(self, ctx: TransactionContext) -> bool:
        return (
            self.config.is_region_member(ctx.seller_jurisdiction_code)
            and self.config.is_region_member(ctx.buyer_jurisdiction_code)
        )
