"""국경간 거래 세무 검증 API 라우터"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional

from ...core import (
    InvalidTransactionError,
    ReportCache,
    RuleEngine,
    TransactionContext,
    build_context,
    context_from_dict,
)
from ... import settings
from ..schemas import (
    CacheStatsResponse,
    JurisdictionsResponse,
    TransactionData,
    ValidateCrossBorderRequest,
    ValidateCrossBorderResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# ReportCache 인스턴스 (전역, 지연 초기화)
_report_cache: Optional[ReportCache] = None


def get_report_cache() -> ReportCache:
    """ReportCache 인스턴스 가져오기 (지연 초기화)"""
    global _report_cache
    if _report_cache is None:
        _report_cache = ReportCache(
            RuleEngine(),
            ttl_seconds=settings.get_cache_ttl_seconds(),
            max_size=settings.get_cache_max_size()
        )
    return _report_cache


def reset_report_cache() -> None:
    """전역 캐시 초기화 (주로 테스트용)"""
    global _report_cache
    _report_cache = None


def _to_context(data: TransactionData) -> TransactionContext:
    """요청 데이터를 거래 컨텍스트로 변환

    금액이 없으면 송장 라인으로부터 계산합니다.
    """
    lines = [line.model_dump() for line in data.invoice_lines]

    if data.transaction_amount is None:
        return build_context(
            seller_jurisdiction_code=data.seller_jurisdiction_code,
            buyer_jurisdiction_code=data.buyer_jurisdiction_code,
            seller_establishment=data.seller_establishment,
            invoice_lines=lines,
            buyer_location=data.buyer_location,
            buyer_type=data.buyer_type,
            buyer_kind=data.buyer_kind,
            buyer_name=data.buyer_name,
            product_types=data.product_types,
            transaction_date=data.transaction_date,
        )

    payload = data.model_dump()
    payload['invoice_lines'] = lines
    return context_from_dict(payload)


@router.post("/validate_cross_border", response_model=ValidateCrossBorderResponse)
async def validate_cross_border(
    request: ValidateCrossBorderRequest,
    cache: ReportCache = Depends(get_report_cache)
):
    """국경간 거래 검증

    거래를 분류하고 역과세, 등록 요건, 권고 사항, 필요 서류를 반환합니다.
    세액을 계산하지 않는 자문 결과입니다.
    """
    try:
        ctx = _to_context(request.transaction)
    except InvalidTransactionError as e:
        logger.warning("Rejected cross-border transaction: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    report = cache.validate(ctx)
    return report.to_dict()


@router.get("/jurisdictions", response_model=JurisdictionsResponse)
async def list_jurisdictions(cache: ReportCache = Depends(get_report_cache)):
    """설정된 지역 연합 회원 관할과 지원 관할 조회"""
    config = cache.engine.config
    return JurisdictionsResponse(
        rule_version=config.version,
        effective_date=config.effective_date,
        region_members=sorted(config.region_members),
        supported_jurisdictions=sorted(config.supported_jurisdictions),
    )


@router.get("/cache_stats", response_model=CacheStatsResponse)
async def cache_stats(cache: ReportCache = Depends(get_report_cache)):
    """검증 결과 캐시 적중률 조회"""
    return CacheStatsResponse(size=len(cache), **cache.stats().to_dict())
