"""TaxRuleConfig: 국경간 거래 규칙 설정

지역 연합 회원 관할, 지원 관할, 관할별 기준금액, 디지털 서비스 키워드 등
규칙 엔진이 사용하는 모든 설정 테이블을 하나의 불변 값으로 묶습니다.
설정은 YAML 파일에서 로드되며 엔진 생성 시 주입됩니다.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

import yaml


logger = logging.getLogger(__name__)

DEFAULT_RULES_FILE = Path(__file__).resolve().parent.parent / "rules" / "cross_border_2024.yaml"


class RuleConfigError(ValueError):
    """규칙 설정 파일 형식 오류"""


def _amount(value: Any, name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except ArithmeticError:
        raise RuleConfigError(f"{name} must be numeric: {value!r}")
    if not amount.is_finite():
        raise RuleConfigError(f"{name} must be a finite number: {value!r}")
    if amount < 0:
        raise RuleConfigError(f"{name} must not be negative: {amount}")
    return amount


def _codes(values: Any, name: str) -> FrozenSet[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        raise RuleConfigError(f"{name} must be a list of jurisdiction codes")
    return frozenset(str(code).strip().upper() for code in values)


def _words(values: Any, name: str, lower: bool = True) -> Tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        raise RuleConfigError(f"{name} must be a list of strings")
    words = (str(value).strip() for value in values)
    return tuple(word.lower() if lower else word for word in words)


def _effective_date(value: Any) -> date:
    if value is None:
        return date.min
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise RuleConfigError(f"effective_date must be an ISO date: {value!r}")


@dataclass(frozen=True)
class TaxRuleConfig:
    """규칙 엔진 설정 테이블

    Attributes:
        version: 규칙 버전 (예: "2024.1")
        effective_date: 시행일
        region_members: 지역 연합 회원 관할 코드
        supported_jurisdictions: 상세 검증을 지원하는 관할 코드
        distance_selling_thresholds: 관할별 원격판매 기준금액
        default_distance_selling_threshold: 표에 없는 관할의 원격판매 기준금액
        registration_thresholds: 관할별 부가가치세 등록 기준금액 (순서 유지)
        digital_service_keywords: 디지털 서비스 판별 키워드 (소문자)
        digital_product_types: 디지털 서비스로 간주하는 상품 유형
        documentation_amount_threshold: 고객 신원확인 서류가 필요한 금액 (초과)
        export_registration_amount_threshold: 수출 시 현지 등록 검토 금액 (초과)
    """

    version: str
    effective_date: date
    region_members: FrozenSet[str]
    supported_jurisdictions: FrozenSet[str]
    distance_selling_thresholds: Dict[str, Decimal]
    default_distance_selling_threshold: Decimal
    registration_thresholds: Tuple[Tuple[str, Decimal], ...]
    digital_service_keywords: Tuple[str, ...]
    digital_product_types: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"digital_services", "software"})
    )
    documentation_amount_threshold: Decimal = Decimal("1000")
    export_registration_amount_threshold: Decimal = Decimal("10000")
    description: str = ""

    def is_region_member(self, code: str) -> bool:
        return code in self.region_members

    def is_supported(self, code: str) -> bool:
        return code in self.supported_jurisdictions

    def distance_selling_threshold(self, code: str) -> Decimal:
        """원격판매 기준금액 조회

        Args:
            code: 구매자 관할 코드

        Returns:
            관할별 기준금액, 표에 없으면 기본값
        """
        return self.distance_selling_thresholds.get(
            code, self.default_distance_selling_threshold
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaxRuleConfig":
        """딕셔너리에서 설정 생성

        Args:
            data: YAML에서 로드한 규칙 딕셔너리

        Returns:
            TaxRuleConfig

        Raises:
            RuleConfigError: 필수 테이블이 없거나 값이 잘못된 경우
        """
        if not isinstance(data, dict):
            raise RuleConfigError("rule data must be a mapping")

        required_fields = [
            'version',
            'region_members',
            'supported_jurisdictions',
            'distance_selling_thresholds',
            'registration_thresholds',
            'digital_service_keywords',
        ]
        for name in required_fields:
            if name not in data:
                raise RuleConfigError(f"Missing required field: {name}")

        distance = data['distance_selling_thresholds']
        if not isinstance(distance, dict) or 'default' not in distance:
            raise RuleConfigError("distance_selling_thresholds requires a default")
        distance_by_code = {
            str(code).upper(): _amount(value, f"distance_selling_thresholds.{code}")
            for code, value in (distance.get('jurisdictions') or {}).items()
        }

        registration = data['registration_thresholds']
        if not isinstance(registration, dict):
            raise RuleConfigError("registration_thresholds must be a mapping")
        registration_by_code = tuple(
            (str(code).upper(), _amount(value, f"registration_thresholds.{code}"))
            for code, value in registration.items()
        )

        optional = {}
        if 'digital_product_types' in data:
            optional['digital_product_types'] = frozenset(
                _words(data['digital_product_types'], 'digital_product_types', lower=False)
            )
        if 'documentation_amount_threshold' in data:
            optional['documentation_amount_threshold'] = _amount(
                data['documentation_amount_threshold'], 'documentation_amount_threshold'
            )
        if 'export_registration_amount_threshold' in data:
            optional['export_registration_amount_threshold'] = _amount(
                data['export_registration_amount_threshold'],
                'export_registration_amount_threshold'
            )

        return cls(
            version=str(data['version']),
            effective_date=_effective_date(data.get('effective_date')),
            region_members=_codes(data['region_members'], 'region_members'),
            supported_jurisdictions=_codes(
                data['supported_jurisdictions'], 'supported_jurisdictions'
            ),
            distance_selling_thresholds=distance_by_code,
            default_distance_selling_threshold=_amount(
                distance['default'], 'distance_selling_thresholds.default'
            ),
            registration_thresholds=registration_by_code,
            digital_service_keywords=_words(
                data['digital_service_keywords'], 'digital_service_keywords'
            ),
            description=data.get('description', ''),
            **optional
        )

    @classmethod
    def from_yaml(cls, rules_file: Union[str, Path]) -> "TaxRuleConfig":
        """YAML 파일에서 설정 로드

        Raises:
            FileNotFoundError: 규칙 파일이 없는 경우
            yaml.YAMLError: YAML 파싱 오류
            RuleConfigError: 규칙 형식 오류
        """
        rules_path = Path(rules_file)

        if not rules_path.exists():
            raise FileNotFoundError(f"Rule file not found: {rules_path}")

        with open(rules_path, 'r', encoding='utf-8') as f:
            config = cls.from_dict(yaml.safe_load(f))

        logger.info("Loaded cross-border rules %s from %s", config.version, rules_path)
        return config

    def __str__(self) -> str:
        return (
            f"TaxRuleConfig(v{self.version}, {len(self.region_members)} region members, "
            f"{len(self.supported_jurisdictions)} supported)"
        )


# 싱글톤 인스턴스
_default_config: Optional[TaxRuleConfig] = None


def get_default_config() -> TaxRuleConfig:
    """기본 규칙 설정 가져오기

    CROSSBORDER_RULES_FILE 환경 변수가 있으면 해당 파일을, 없으면
    패키지에 포함된 규칙 파일을 로드합니다.

    Returns:
        기본 TaxRuleConfig 인스턴스
    """
    global _default_config
    if _default_config is None:
        from ..settings import get_rules_file
        _default_config = TaxRuleConfig.from_yaml(get_rules_file() or DEFAULT_RULES_FILE)
    return _default_config


def reset_default_config() -> None:
    """기본 규칙 설정 초기화 (주로 테스트용)"""
    global _default_config
    _default_config = None
