"""FastAPI 애플리케이션 메인"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .. import __version__
from ..core import get_default_config
from ..settings import configure_logging
from .routers import tax


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 라이프사이클 관리"""
    # 시작 시 로깅 설정 및 규칙 로드 (규칙 파일 오류는 기동 시점에 드러남)
    configure_logging()
    get_default_config()
    yield


# FastAPI 앱 생성
app = FastAPI(
    title="Cross-border Tax Advisor API",
    description="국경간 거래 부가가치세 분류 및 자문",
    version=__version__,
    lifespan=lifespan
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 프로덕션에서는 특정 도메인만 허용
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(
    tax.router,
    prefix="/api/v1/tax",
    tags=["국경간 거래 검증"]
)


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "Cross-border Tax Advisor API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """헬스체크 엔드포인트"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
