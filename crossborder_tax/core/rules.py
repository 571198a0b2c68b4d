"""국경간 거래 검증 규칙

각 규칙은 (컨텍스트, 분류, 설정, 누적 결과) -> RuleOutcome 형태의 순수 함수입니다.
규칙은 공유 상태를 변경하지 않고 새로운 부분 결과만 반환하며,
RuleEngine이 정해진 순서대로 누적(fold)합니다.
"""

from dataclasses import dataclass
from typing import Callable, Tuple

from .classifier import Classification
from .models import (
    TransactionContext,
    ValidationResultEntry,
    ValidationStatus,
)
from .rule_config import TaxRuleConfig


@dataclass(frozen=True)
class RuleOutcome:
    """규칙 평가 결과 (부분 결과 또는 누적 결과)

    Attributes:
        entries: 검증 항목 (순서 유지)
        warnings: 경고 메시지
        recommendations: 권고 사항
        documents: 필요 서류
    """

    entries: Tuple[ValidationResultEntry, ...] = ()
    warnings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    documents: Tuple[str, ...] = ()

    def merge(self, other: "RuleOutcome") -> "RuleOutcome":
        """두 결과를 이어붙인 새 결과 반환 (중복 제거 없음)"""
        return RuleOutcome(
            entries=self.entries + other.entries,
            warnings=self.warnings + other.warnings,
            recommendations=self.recommendations + other.recommendations,
            documents=self.documents + other.documents,
        )


Rule = Callable[[TransactionContext, Classification, TaxRuleConfig, RuleOutcome], RuleOutcome]


def _outcome(*entries: ValidationResultEntry, recommendations=(), documents=()) -> RuleOutcome:
    """경고 상태 항목의 메시지는 warnings 목록에도 기록"""
    return RuleOutcome(
        entries=tuple(entries),
        warnings=tuple(e.message for e in entries if e.status is ValidationStatus.WARNING),
        recommendations=tuple(recommendations),
        documents=tuple(documents),
    )


def check_jurisdiction_support(ctx, classification, config, accumulated) -> RuleOutcome:
    """1. 지원 관할 확인"""
    unsupported = [
        code
        for code in (ctx.seller_jurisdiction_code, ctx.buyer_jurisdiction_code)
        if not config.is_supported(code)
    ]

    if unsupported:
        return _outcome(ValidationResultEntry(
            key='jurisdiction_support',
            status=ValidationStatus.WARNING,
            message=f"Unsupported jurisdictions: {', '.join(unsupported)}",
            details="Limited validation available for these jurisdictions",
        ))

    return _outcome(ValidationResultEntry(
        key='jurisdiction_support',
        status=ValidationStatus.SUCCESS,
        message="All jurisdictions supported",
    ))


_TRANSACTION_TYPE_MESSAGES = {
    'domestic': ("Domestic transaction", "Standard domestic tax rules apply"),
    'intra_region': ("Intra-region transaction detected", "Special regional tax rules apply"),
    'export': ("Export transaction detected", "Export tax exemption may apply"),
}


def check_transaction_type(ctx, classification, config, accumulated) -> RuleOutcome:
    """2. 거래 분류 (항상 info)"""
    transaction_type = classification.transaction_type
    message, details = _TRANSACTION_TYPE_MESSAGES[transaction_type.value]

    return _outcome(ValidationResultEntry(
        key='transaction_type',
        status=ValidationStatus.INFO,
        message=message,
        details=details,
        transaction_type=transaction_type,
    ))


def check_region_rules(ctx, classification, config, accumulated) -> RuleOutcome:
    """3. 지역 연합 내 거래 규칙 (B2B 역과세 / B2C 원격판매)"""
    if not classification.region_transaction:
        return RuleOutcome()

    if ctx.is_business_buyer:
        return _outcome(
            ValidationResultEntry(
                key='reverse_charge',
                status=ValidationStatus.INFO,
                message="Reverse charge mechanism applies",
                details="Customer pays VAT in their country",
                required=True,
            ),
            ValidationResultEntry(
                key='tax_exemption',
                status=ValidationStatus.SUCCESS,
                message="Intra-region supply exemption applies",
                details="Zero-rated for VAT in seller country",
                applicable=True,
            ),
            documents=(
                "Valid VAT number verification",
                "Proof of goods movement within the region",
                "Invoice with correct reverse charge mention",
            ),
            recommendations=(
                "Verify buyer VAT number through the regional VAT registry",
                "Include reverse charge clause on invoice",
                "Maintain proof of intra-region supply",
            ),
        )

    # B2C: 원격판매 기준금액
    buyer_code = ctx.buyer_jurisdiction_code
    threshold = config.distance_selling_threshold(buyer_code)
    entries = [ValidationResultEntry(
        key='distance_selling',
        status=ValidationStatus.WARNING,
        message="B2C distance selling rules may apply",
        details=f"Check if annual sales to {buyer_code} exceed {threshold}",
        threshold=threshold,
    )]

    if classification.digital_services:
        entries.append(ValidationResultEntry(
            key='oss_requirement',
            status=ValidationStatus.INFO,
            message="OSS (One Stop Shop) registration may be required",
            details="For digital services to consumers within the region",
            required=True,
        ))

    return _outcome(
        *entries,
        recommendations=(
            "Monitor distance selling thresholds",
            "Consider OSS registration for digital services",
            "Apply destination country VAT rate if threshold exceeded",
        ),
    )


def check_export_rules(ctx, classification, config, accumulated) -> RuleOutcome:
    """4. 수출 거래 규칙"""
    if not classification.export_transaction:
        return RuleOutcome()

    entries = [ValidationResultEntry(
        key='export_exemption',
        status=ValidationStatus.SUCCESS,
        message="Export tax exemption applicable",
        details="Zero-rated for domestic VAT",
        applicable=True,
    )]

    if classification.digital_services:
        entries.append(ValidationResultEntry(
            key='digital_export',
            status=ValidationStatus.WARNING,
            message="Digital services export rules apply",
            details="May be subject to destination country tax rules",
        ))

    return _outcome(
        *entries,
        documents=(
            "Export declaration",
            "Proof of export (shipping documents)",
            "Customer purchase order",
        ),
        recommendations=(
            "Maintain export documentation",
            "Verify customer location for digital services",
            "Consider local tax registration requirements",
        ),
    )


def check_digital_services(ctx, classification, config, accumulated) -> RuleOutcome:
    """5. 디지털 서비스 규칙"""
    if not classification.digital_services:
        return RuleOutcome()

    detected = ValidationResultEntry(
        key='digital_services',
        status=ValidationStatus.INFO,
        message="Digital services detected",
        details="Special VAT rules apply for digital services",
    )

    if not classification.cross_border:
        return _outcome(detected)

    return _outcome(
        detected,
        ValidationResultEntry(
            key='digital_vat_location',
            status=ValidationStatus.WARNING,
            message="Digital services VAT location rules apply",
            details="VAT typically due in customer location country",
        ),
        recommendations=(
            "Determine customer location for VAT purposes",
            "Consider local VAT registration",
            "Apply destination country VAT rate",
        ),
    )


def check_threshold_requirements(ctx, classification, config, accumulated) -> RuleOutcome:
    """6. 관할별 등록 기준금액

    연간 누적 매출이 아닌 단일 거래 금액으로 비교하는 근사치입니다.
    """
    entries = [
        ValidationResultEntry(
            key=f"{code}_vat_threshold",
            status=ValidationStatus.WARNING,
            message=f"VAT registration threshold approached in {code}",
            details="Consider local VAT registration",
            threshold=threshold,
        )
        for code, threshold in config.registration_thresholds
        if ctx.transaction_amount >= threshold
    ]
    return _outcome(*entries)


def check_documentation_requirements(ctx, classification, config, accumulated) -> RuleOutcome:
    """7. 필요 서류 (누적 서류 목록 스냅샷 포함)"""
    documents = ["Commercial invoice", "Contract/Purchase order"]

    if classification.cross_border:
        documents.append("Proof of customer location")

        if ctx.transaction_amount > config.documentation_amount_threshold:
            documents.append("Customer identification documents")

    snapshot = accumulated.documents + tuple(documents)

    return _outcome(
        ValidationResultEntry(
            key='documentation',
            status=ValidationStatus.INFO,
            message=f"{len(snapshot)} documents required",
            documents=snapshot,
        ),
        documents=documents,
    )


def check_tax_registration_requirements(ctx, classification, config, accumulated) -> RuleOutcome:
    """8. 추가 세무 등록 요건"""
    buyer_code = ctx.buyer_jurisdiction_code
    requirements = []

    if classification.region_transaction and not ctx.is_business_buyer:
        requirements.append(f"VAT registration in {buyer_code} (if threshold exceeded)")

    if classification.digital_services and classification.cross_border:
        requirements.append("OSS registration (for regional digital services)")
        requirements.append(f"Local tax registration in {buyer_code} (alternative to OSS)")

    if (classification.export_transaction
            and ctx.transaction_amount > config.export_registration_amount_threshold):
        requirements.append(f"Local tax registration may be required in {buyer_code}")

    if requirements:
        return _outcome(ValidationResultEntry(
            key='tax_registration',
            status=ValidationStatus.WARNING,
            message="Tax registration requirements detected",
            requirements=tuple(requirements),
        ))

    return _outcome(ValidationResultEntry(
        key='tax_registration',
        status=ValidationStatus.SUCCESS,
        message="No additional tax registrations required",
    ))


# 평가 순서 (표시 순서에만 영향)
DEFAULT_RULES: Tuple[Rule, ...] = (
    check_jurisdiction_support,
    check_transaction_type,
    check_region_rules,
    check_export_rules,
    check_digital_services,
    check_threshold_requirements,
    check_documentation_requirements,
    check_tax_registration_requirements,
)
