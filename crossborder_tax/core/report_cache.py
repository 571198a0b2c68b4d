"""ReportCache: 거래 지문 기반 검증 결과 캐시

엔진 외부의 협력 객체입니다. 동일한 거래를 짧은 시간 안에 반복 검증할 때
보고서를 재사용하며, TTL 만료와 LRU 제거를 지원합니다.
시각은 호출 측에서 주입합니다.
"""

import hashlib
import json
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from .models import TransactionContext
from .rule_engine import RuleEngine
from .validation_report import ValidationReport


def fingerprint(ctx: TransactionContext) -> str:
    """거래 컨텍스트의 캐시 키

    금액은 정수 단위로 반올림하며, 상품 유형은 정렬합니다.
    """
    key = {
        'seller': ctx.seller_jurisdiction_code,
        'buyer': ctx.buyer_jurisdiction_code,
        'amount': str(ctx.transaction_amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
        'products': sorted(ctx.product_types),
        'type': ctx.buyer_type.value,
        'date': ctx.transaction_date.isoformat(),
        'lines': [line.description.lower() for line in ctx.invoice_lines],
    }
    encoded = json.dumps(key, sort_keys=True).encode('utf-8')
    return hashlib.sha256(encoded).hexdigest()


@dataclass
class CachedReport:
    """캐시된 보고서와 만료 시각"""
    report: ValidationReport
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    """캐시 통계"""
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hits': self.hits,
            'misses': self.misses,
            'evictions': self.evictions,
            'hit_rate': round(self.hit_rate, 4),
        }


class ReportCache:
    """검증 보고서 캐시 (TTL + LRU)

    Attributes:
        engine: 캐시 미스 시 사용할 규칙 엔진
        ttl: 보고서 유효 시간
        max_size: 최대 보관 개수
    """

    def __init__(self, engine: RuleEngine, ttl_seconds: int = 300, max_size: int = 1000):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.engine = engine
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_size = max_size
        self._entries: "OrderedDict[str, CachedReport]" = OrderedDict()
        self._stats = CacheStats()

    def get(self, ctx: TransactionContext, now: datetime) -> Optional[ValidationReport]:
        """캐시된 보고서 조회 (없거나 만료되면 None)"""
        key = fingerprint(ctx)
        cached = self._entries.get(key)

        if cached is None:
            self._stats.misses += 1
            return None

        if cached.is_expired(now):
            del self._entries[key]
            self._stats.evictions += 1
            self._stats.misses += 1
            return None

        self._entries.move_to_end(key)
        self._stats.hits += 1
        return cached.report

    def put(self, ctx: TransactionContext, report: ValidationReport, now: datetime) -> None:
        key = fingerprint(ctx)
        self._entries[key] = CachedReport(report=report, expires_at=now + self.ttl)
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            self._stats.evictions += 1

    def validate(self, ctx: TransactionContext, now: Optional[datetime] = None) -> ValidationReport:
        """캐시를 거쳐 거래 검증

        Args:
            ctx: 거래 컨텍스트
            now: 기준 시각 (기본값: 현재 시각)

        Returns:
            검증 보고서
        """
        now = now or datetime.now()

        report = self.get(ctx, now)
        if report is None:
            report = self.engine.validate(ctx)
            self.put(ctx, report, now)

        return report

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> CacheStats:
        return self._stats

    def __len__(self) -> int:
        return len(self._entries)
