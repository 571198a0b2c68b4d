"""RuleEngine: 국경간 거래 세무 검증 엔진"""

import logging
from functools import reduce
from typing import Optional, Sequence

from .classifier import JurisdictionClassifier
from .models import TransactionContext
from .rule_config import TaxRuleConfig, get_default_config
from .rules import DEFAULT_RULES, Rule, RuleOutcome
from .validation_report import ValidationReport


logger = logging.getLogger(__name__)


class RuleEngine:
    """거래 컨텍스트에 검증 규칙을 순서대로 적용하는 엔진

    규칙은 빈 누적 결과에서 시작해 차례로 합쳐지며(fold),
    엔진 자체는 호출 간에 상태를 보관하지 않습니다.
    입출력이 없고 예상되는 런타임 오류도 없습니다.

    Attributes:
        config: 규칙 설정
        classifier: 관할 분류기
        rules: 평가 순서대로의 규칙 목록
    """

    def __init__(
        self,
        config: Optional[TaxRuleConfig] = None,
        rules: Optional[Sequence[Rule]] = None
    ):
        """RuleEngine 초기화

        Args:
            config: 규칙 설정 (기본값: 패키지 기본 규칙)
            rules: 평가할 규칙 목록 (기본값: DEFAULT_RULES)
        """
        self.config = config or get_default_config()
        self.classifier = JurisdictionClassifier(self.config)
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    @property
    def version(self) -> str:
        return self.config.version

    def validate(self, ctx: TransactionContext) -> ValidationReport:
        """거래 검증

        Args:
            ctx: 거래 컨텍스트

        Returns:
            검증 보고서 (같은 입력에는 항상 같은 보고서)
        """
        classification = self.classifier.classify(ctx)
        logger.debug(
            "Validating %s as %s (digital=%s)",
            ctx, classification.transaction_type.value, classification.digital_services
        )

        outcome = reduce(
            lambda accumulated, rule: accumulated.merge(
                rule(ctx, classification, self.config, accumulated)
            ),
            self.rules,
            RuleOutcome(),
        )

        report = ValidationReport.from_outcome(
            outcome,
            transaction_date=ctx.transaction_date,
            rule_version=self.config.version,
        )
        logger.debug(
            "Validation finished: status=%s checks=%d",
            report.summary.status.value, report.summary.total_checks
        )
        return report
