"""ValidationReport: 검증 결과 보고서와 요약 집계"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .models import ValidationResultEntry, ValidationStatus, summarize_statuses
from .rules import RuleOutcome


@dataclass(frozen=True)
class ValidationSummary:
    """검증 요약

    Attributes:
        status: 전체 상태 (error > warning > success 우선순위)
        total_checks: 요약을 제외한 검증 항목 수
        errors: error 항목 수
        warnings: warning 항목 수
        recommendations_count: 권고 사항 수
        documents_required: 필요 서류 수
    """

    status: ValidationStatus
    total_checks: int
    errors: int
    warnings: int
    recommendations_count: int
    documents_required: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'total_checks': self.total_checks,
            'errors': self.errors,
            'warnings': self.warnings,
            'recommendations_count': self.recommendations_count,
            'documents_required': self.documents_required,
        }


def generate_summary(outcome: RuleOutcome) -> ValidationSummary:
    """모든 규칙 결과로부터 요약 생성

    Args:
        outcome: 누적된 규칙 결과 (요약 자신은 포함하지 않음)

    Returns:
        ValidationSummary
    """
    entries = _unique_entries(outcome.entries)
    counts = summarize_statuses(entries.values())
    error_count = counts[ValidationStatus.ERROR]
    warning_count = counts[ValidationStatus.WARNING]

    if error_count > 0:
        status = ValidationStatus.ERROR
    elif warning_count > 0:
        status = ValidationStatus.WARNING
    else:
        status = ValidationStatus.SUCCESS

    return ValidationSummary(
        status=status,
        total_checks=len(entries),
        errors=error_count,
        warnings=warning_count,
        recommendations_count=len(outcome.recommendations),
        documents_required=len(outcome.documents),
    )


def _unique_entries(entries: Iterable[ValidationResultEntry]) -> Dict[str, ValidationResultEntry]:
    """키 기준 매핑 (같은 키는 나중 항목이 우선, 최초 위치 유지)"""
    results: Dict[str, ValidationResultEntry] = {}
    for entry in entries:
        results[entry.key] = entry
    return results


@dataclass(frozen=True)
class ValidationReport:
    """검증 보고서 (불변 값)

    Attributes:
        results: 검사 키 -> 검증 항목 (읽기 전용)
        warnings: 경고 메시지 (중복 제거 없음)
        recommendations: 권고 사항 (중복 제거 없음)
        required_documents: 필요 서류 (중복 제거 없음)
        summary: 요약
        transaction_date: 검증 기준 거래일
        rule_version: 사용된 규칙 버전
    """

    results: Mapping[str, ValidationResultEntry]
    warnings: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    required_documents: Tuple[str, ...]
    summary: ValidationSummary
    transaction_date: Optional[date] = None
    rule_version: Optional[str] = None

    @classmethod
    def from_outcome(
        cls,
        outcome: RuleOutcome,
        transaction_date: Optional[date] = None,
        rule_version: Optional[str] = None
    ) -> "ValidationReport":
        """누적된 규칙 결과로 보고서 생성 (요약은 항상 마지막에 계산)"""
        return cls(
            results=MappingProxyType(_unique_entries(outcome.entries)),
            warnings=outcome.warnings,
            recommendations=outcome.recommendations,
            required_documents=outcome.documents,
            summary=generate_summary(outcome),
            transaction_date=transaction_date,
            rule_version=rule_version,
        )

    def get(self, key: str) -> Optional[ValidationResultEntry]:
        return self.results.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.results

    @property
    def valid(self) -> bool:
        return is_valid(self)

    @property
    def reverse_charge_required(self) -> bool:
        return reverse_charge_required(self)

    @property
    def tax_exemption_applicable(self) -> bool:
        return tax_exemption_applicable(self)

    def to_dict(self) -> Dict[str, Any]:
        """UI 응답 형태로 변환

        validation_results에도 summary를 포함합니다.
        """
        validation_results = {key: entry.to_dict() for key, entry in self.results.items()}
        summary = self.summary.to_dict()
        validation_results['summary'] = summary

        return {
            'validation_results': validation_results,
            'warnings': list(self.warnings),
            'recommendations': list(self.recommendations),
            'required_documents': list(self.required_documents),
            'summary': summary,
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else None,
            'rule_version': self.rule_version,
        }

    def get_summary(self) -> str:
        """사람이 읽기 쉬운 형태의 요약"""
        lines = [
            "=== Cross-border validation ===",
            f"Status:          {self.summary.status.value}",
            f"Checks:          {self.summary.total_checks}",
            f"Warnings:        {self.summary.warnings}",
            f"Errors:          {self.summary.errors}",
            f"Recommendations: {self.summary.recommendations_count}",
            f"Documents:       {self.summary.documents_required}",
        ]
        if self.rule_version:
            lines.append(f"Rule version:    {self.rule_version}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.get_summary()


def is_valid(report: ValidationReport) -> bool:
    """error 상태 항목이 없으면 True"""
    return not any(
        entry.status is ValidationStatus.ERROR for entry in report.results.values()
    )


def reverse_charge_required(report: ValidationReport) -> bool:
    """역과세 적용 여부 (항목이 없으면 False)"""
    entry = report.results.get('reverse_charge')
    return entry is not None and entry.required is True


def tax_exemption_applicable(report: ValidationReport) -> bool:
    """지역 내 공급 면세 적용 여부 (항목이 없으면 False)"""
    entry = report.results.get('tax_exemption')
    return entry is not None and entry.applicable is True
