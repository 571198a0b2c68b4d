"""API 요청/응답 스키마 (Pydantic)"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import date
from decimal import Decimal


# ============================================================================
# 국경간 거래 검증 요청
# ============================================================================

class InvoiceLineData(BaseModel):
    """송장 라인"""
    description: Optional[str] = Field(None, description="품목 설명")
    quantity: Decimal = Field(Decimal(1), description="수량", ge=0)
    unit_price: Decimal = Field(Decimal(0), description="단가", ge=0)
    tax_rate: Optional[Decimal] = Field(None, description="세율 (%)", ge=0)
    discount_percentage: Optional[Decimal] = Field(None, description="할인율 (%)", ge=0, le=100)


class TransactionData(BaseModel):
    """검증 대상 거래

    transaction_amount를 생략하면 송장 라인의 할인 후 금액 합계로 계산하고,
    product_types / buyer_type을 생략하면 라인 설명과 구매자 정보로 추정합니다.
    """
    seller_jurisdiction_code: str = Field(..., description="판매자 관할 코드", min_length=1)
    buyer_jurisdiction_code: str = Field(..., description="구매자 관할 코드", min_length=1)
    seller_establishment: str = Field(..., description="판매 사업장 ID")
    buyer_location: Optional[str] = Field(None, description="구매자 위치")
    transaction_amount: Optional[Decimal] = Field(None, description="거래 금액", ge=0)
    product_types: Optional[List[str]] = Field(None, description="상품 유형")
    buyer_type: Optional[str] = Field(None, description="구매자 유형 (business, consumer)")
    buyer_kind: Optional[str] = Field(None, description="구매자 종류 (company, contact)")
    buyer_name: Optional[str] = Field(None, description="구매자 표시 이름")
    invoice_lines: List[InvoiceLineData] = Field(default_factory=list, description="송장 라인")
    transaction_date: Optional[date] = Field(None, description="거래일")

    class Config:
        json_schema_extra = {
            "example": {
                "seller_jurisdiction_code": "ESP",
                "buyer_jurisdiction_code": "PRT",
                "seller_establishment": "1",
                "buyer_location": "Lisbon",
                "transaction_amount": 5000,
                "product_types": ["goods"],
                "buyer_type": "business",
                "invoice_lines": [
                    {"description": "Industrial equipment", "quantity": 2, "unit_price": 2500}
                ],
                "transaction_date": "2024-06-01"
            }
        }


class ValidateCrossBorderRequest(BaseModel):
    """국경간 거래 검증 요청"""
    transaction: TransactionData


# ============================================================================
# 검증 응답
# ============================================================================

class ValidationSummaryResponse(BaseModel):
    """검증 요약"""
    status: str
    total_checks: int
    errors: int
    warnings: int
    recommendations_count: int
    documents_required: int


class ValidateCrossBorderResponse(BaseModel):
    """국경간 거래 검증 응답"""
    validation_results: Dict[str, Dict[str, Any]]
    warnings: List[str]
    recommendations: List[str]
    required_documents: List[str]
    summary: ValidationSummaryResponse
    transaction_date: Optional[date] = None
    rule_version: Optional[str] = None


class JurisdictionsResponse(BaseModel):
    """설정된 관할 정보"""
    rule_version: str
    effective_date: date
    region_members: List[str]
    supported_jurisdictions: List[str]


class CacheStatsResponse(BaseModel):
    """검증 결과 캐시 통계"""
    hits: int
    misses: int
    evictions: int
    hit_rate: float
    size: int = Field(..., description="현재 보관 중인 보고서 수")
