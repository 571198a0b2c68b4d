"""거래 컨텍스트와 검증 결과 엔트리 (불변 데이터 모델)"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple


class InvalidTransactionError(ValueError):
    """거래 컨텍스트가 입력 계약을 위반한 경우

    엔진에 도달하기 전, 컨텍스트 생성 시점에 발생합니다.
    """


class BuyerType(Enum):
    """구매자 유형"""
    BUSINESS = "business"
    CONSUMER = "consumer"


class ValidationStatus(Enum):
    """검증 결과 상태"""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class TransactionType(Enum):
    """거래 분류"""
    DOMESTIC = "domestic"
    INTRA_REGION = "intra_region"
    EXPORT = "export"


def _to_decimal(value: Any, field_name: str) -> Decimal:
    """숫자 값을 Decimal로 변환 (float는 문자열 경유)"""
    if value is None:
        raise InvalidTransactionError(f"{field_name} is required")
    if isinstance(value, bool):
        raise InvalidTransactionError(f"{field_name} must be numeric, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidTransactionError(f"{field_name} must be numeric, got {value!r}")
    if not amount.is_finite():
        raise InvalidTransactionError(f"{field_name} must be a finite number, got {value!r}")
    return amount


@dataclass(frozen=True)
class InvoiceLine:
    """송장 라인

    Attributes:
        description: 품목 설명
        quantity: 수량
        unit_price: 단가
        tax_rate: 세율 (%)
        discount_percentage: 할인율 (0~100)
    """

    description: str
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    discount_percentage: Decimal = Decimal("0")

    def __post_init__(self):
        if self.description is None:
            object.__setattr__(self, 'description', "")

        for name in ('quantity', 'unit_price', 'tax_rate', 'discount_percentage'):
            value = _to_decimal(getattr(self, name), name)
            if value < 0:
                raise InvalidTransactionError(f"{name} must not be negative: {value}")
            object.__setattr__(self, name, value)

        if self.discount_percentage > 100:
            raise InvalidTransactionError(
                f"discount_percentage must be between 0 and 100: {self.discount_percentage}"
            )

    @property
    def net_amount(self) -> Decimal:
        """할인 적용 후 라인 금액"""
        return self.quantity * self.unit_price * (1 - self.discount_percentage / 100)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InvoiceLine":
        return cls(
            description=data.get('description') or "",
            quantity=data.get('quantity', 1),
            unit_price=data.get('unit_price', 0),
            tax_rate=data.get('tax_rate') or 0,
            discount_percentage=data.get('discount_percentage') or 0,
        )

    def to_dict(self) -> dict:
        return {
            'description': self.description,
            'quantity': str(self.quantity),
            'unit_price': str(self.unit_price),
            'tax_rate': str(self.tax_rate),
            'discount_percentage': str(self.discount_percentage),
        }


@dataclass(frozen=True)
class TransactionContext:
    """단일 상거래에 대한 검증 입력

    호출 측에서 생성하며, 한 번의 검증 동안 변경되지 않습니다.
    필수 필드가 없거나 잘못된 경우 생성 시점에 InvalidTransactionError를 발생시킵니다.

    Attributes:
        seller_jurisdiction_code: 판매자 관할 코드 (예: "ESP")
        buyer_jurisdiction_code: 구매자 관할 코드
        seller_establishment: 판매자 사업장 식별자
        buyer_location: 구매자 위치 (자유 텍스트)
        transaction_amount: 거래 금액 (0 이상)
        buyer_type: 구매자 유형 (필수, 기본값 없음)
        product_types: 상품 유형 집합 (예: {"goods", "digital_services"})
        invoice_lines: 송장 라인 (순서 유지)
        transaction_date: 거래일 (미지정 시 오늘)

    Example:
        >>> ctx = TransactionContext(
        ...     seller_jurisdiction_code="ESP",
        ...     buyer_jurisdiction_code="PRT",
        ...     seller_establishment="1",
        ...     buyer_location="Lisbon",
        ...     transaction_amount=Decimal("5000"),
        ...     buyer_type=BuyerType.BUSINESS,
        ...     transaction_date=date(2024, 6, 1),
        ... )
    """

    seller_jurisdiction_code: str
    buyer_jurisdiction_code: str
    seller_establishment: str
    buyer_location: str
    transaction_amount: Decimal
    buyer_type: BuyerType
    product_types: FrozenSet[str] = field(default_factory=frozenset)
    invoice_lines: Tuple[InvoiceLine, ...] = ()
    transaction_date: Optional[date] = None

    def __post_init__(self):
        """초기화 후 검증 및 정규화"""
        for name in ('seller_jurisdiction_code', 'buyer_jurisdiction_code'):
            code = getattr(self, name)
            if not isinstance(code, str) or not code.strip():
                raise InvalidTransactionError(f"{name} is required")
            object.__setattr__(self, name, code.strip().upper())

        if self.seller_establishment is None:
            raise InvalidTransactionError("seller_establishment is required")
        object.__setattr__(self, 'seller_establishment', str(self.seller_establishment))
        object.__setattr__(self, 'buyer_location', self.buyer_location or "")

        amount = _to_decimal(self.transaction_amount, 'transaction_amount')
        if amount < 0:
            raise InvalidTransactionError(f"transaction_amount must not be negative: {amount}")
        object.__setattr__(self, 'transaction_amount', amount)

        product_types = self.product_types or ()
        if isinstance(product_types, str):
            product_types = (product_types,)
        object.__setattr__(self, 'product_types', frozenset(product_types))
        object.__setattr__(self, 'buyer_type', self._coerce_buyer_type(self.buyer_type))
        object.__setattr__(self, 'invoice_lines', self._coerce_lines(self.invoice_lines))

        # transaction_date가 None이면 오늘 날짜로 설정
        if self.transaction_date is None:
            object.__setattr__(self, 'transaction_date', date.today())
        elif isinstance(self.transaction_date, str):
            try:
                parsed = date.fromisoformat(self.transaction_date)
            except ValueError:
                raise InvalidTransactionError(
                    f"transaction_date must be an ISO date: {self.transaction_date!r}"
                )
            object.__setattr__(self, 'transaction_date', parsed)

    @staticmethod
    def _coerce_buyer_type(value: Any) -> BuyerType:
        if isinstance(value, BuyerType):
            return value
        try:
            return BuyerType(value)
        except ValueError:
            raise InvalidTransactionError(
                f"buyer_type must be one of business, consumer: {value!r}"
            )

    @staticmethod
    def _coerce_lines(lines: Optional[Iterable[Any]]) -> Tuple[InvoiceLine, ...]:
        result = []
        for line in lines or ():
            if isinstance(line, InvoiceLine):
                result.append(line)
            elif isinstance(line, dict):
                result.append(InvoiceLine.from_dict(line))
            else:
                raise InvalidTransactionError(f"invalid invoice line: {line!r}")
        return tuple(result)

    @property
    def is_business_buyer(self) -> bool:
        return self.buyer_type is BuyerType.BUSINESS

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            'seller_jurisdiction_code': self.seller_jurisdiction_code,
            'buyer_jurisdiction_code': self.buyer_jurisdiction_code,
            'seller_establishment': self.seller_establishment,
            'buyer_location': self.buyer_location,
            'transaction_amount': str(self.transaction_amount),
            'product_types': sorted(self.product_types),
            'buyer_type': self.buyer_type.value,
            'invoice_lines': [line.to_dict() for line in self.invoice_lines],
            'transaction_date': self.transaction_date.isoformat(),
        }

    def __str__(self) -> str:
        return (
            f"TransactionContext({self.seller_jurisdiction_code} -> "
            f"{self.buyer_jurisdiction_code}, {self.transaction_amount}, "
            f"{self.buyer_type.value})"
        )


@dataclass(frozen=True)
class ValidationResultEntry:
    """개별 검증 항목의 결과

    Attributes:
        key: 검사 식별자 (예: "reverse_charge")
        status: 결과 상태
        message: 요약 메시지
        details: 상세 설명
        transaction_type: 거래 분류 (transaction_type 항목 전용)
        threshold: 관련 기준금액
        requirements: 등록 요건 목록
        documents: 필요 서류 목록 (작성 시점 스냅샷)
        required: 필수 여부
        applicable: 적용 가능 여부
    """

    key: str
    status: ValidationStatus
    message: str
    details: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    threshold: Optional[Decimal] = None
    requirements: Optional[Tuple[str, ...]] = None
    documents: Optional[Tuple[str, ...]] = None
    required: Optional[bool] = None
    applicable: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (설정되지 않은 선택 필드는 생략)"""
        data: Dict[str, Any] = {
            'status': self.status.value,
            'message': self.message,
        }
        if self.details is not None:
            data['details'] = self.details
        if self.transaction_type is not None:
            data['type'] = self.transaction_type.value
        if self.threshold is not None:
            data['threshold'] = _serialize_amount(self.threshold)
        if self.requirements is not None:
            data['requirements'] = list(self.requirements)
        if self.documents is not None:
            data['documents'] = list(self.documents)
        if self.required is not None:
            data['required'] = self.required
        if self.applicable is not None:
            data['applicable'] = self.applicable
        return data


def _serialize_amount(value: Decimal) -> Any:
    """정수 금액은 int로, 그 외는 문자열로"""
    if value == value.to_integral_value():
        return int(value)
    return str(value)


def summarize_statuses(entries: Iterable[ValidationResultEntry]) -> Dict[ValidationStatus, int]:
    """상태별 항목 수 집계"""
    counts: Dict[ValidationStatus, int] = {status: 0 for status in ValidationStatus}
    for entry in entries:
        counts[entry.status] += 1
    return counts
