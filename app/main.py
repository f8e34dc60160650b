"""
TimeTOGO Backend - FastAPI Application

도착 시각 기반 대중교통 경로 안내
실시간 위치 추적, 환승 지점 감지, 도보 turn-by-turn 안내
"""

import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import TimeToGoException
from app.models.responses import ErrorResponse
from app.db.redis_client import init_redis
from app.middleware.request_timing import RequestTimingMiddleware
from app.api.v1.router import api_router
from app.api.v1.endpoints.websocket import manager as websocket_manager

# 로깅 설정
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 생명주기 관리

    서버 시작 시 실행:
    - Redis 클라이언트 초기화 (도보 경로 캐시)

    서버 종료 시 실행:
    - 남아있는 추적 세션 정리
    """
    # ========== Startup ==========
    logger.info("=" * 60)
    logger.info("TimeTOGO Backend 시작 중...")
    logger.info("=" * 60)

    redis_manager = init_redis()
    if not redis_manager.ping():
        # 캐시 없이도 동작 => 도보 경로 API 직접 호출
        logger.warning("Redis 연결 실패: 도보 경로 캐시 없이 실행합니다")

    logger.info("TimeTOGO Backend 시작 완료!")

    # application 실행 <- yield로 제어 반환
    yield

    # ========== Shutdown ==========
    logger.info("TimeTOGO Backend 종료 중...")
    for user_id in list(websocket_manager.sessions):
        await websocket_manager.stop_session(user_id)
    logger.info("✓ TimeTOGO Backend 종료 완료")


# FastAPI 애플리케이션 생성
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="""
    ## 도착 시각 기반 대중교통 경로 안내

    ### 주요 기능
    - 🚶 출발 감지 (출발지에서 10m 이상 이동)
    - 🚌 환승 지점 근접 알림 (50m 이내)
    - 🧭 도보 turn-by-turn 안내
    - 📍 나침반 heading 스무딩
    - 👥 경로 공유 및 참여자 위치 확인

    ### WebSocket 연결
```
    ws://localhost:5001/v1/ws/{user_id}
```
    """,
    lifespan=lifespan,  # 생명주기 관리자 등록
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS 설정
# allow_credentials=True일 때는 allow_origins에 ["*"]를 사용할 수 없음
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.ENABLE_REQUEST_TIMING:
    app.add_middleware(RequestTimingMiddleware)

# API 라우터 등록
app.include_router(api_router, prefix="/v1")


# ========== Health Check Endpoints ==========


@app.get("/")
async def root():
    """서비스 기본 정보 반환"""
    return {
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "features": [
            "실시간 위치 추적",
            "환승 지점 알림",
            "도보 상세 안내",
            "경로 공유",
        ],
        "docs": "/docs",
        "websocket": f"ws://localhost:{settings.PORT}/v1/ws/{{user_id}}",
    }


@app.get("/health")
async def health_check():
    """
    헬스 체크 엔드포인트

    Redis는 캐시 용도 => 장애여도 degraded
    """
    redis_status = "healthy" if init_redis().ping() else "unhealthy"

    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy" if redis_status == "healthy" else "degraded",
            "version": settings.VERSION,
            "timestamp": time.time(),
            "components": {"redis": redis_status},
            "active_sessions": len(websocket_manager.sessions),
            "active_connections": websocket_manager.get_connection_count(),
        },
    )


# ========== Exception Handlers ==========


@app.exception_handler(TimeToGoException)
async def timetogo_exception_handler(request, exc: TimeToGoException):
    logger.warning(f"요청 처리 실패: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(message=exc.message, code=exc.code).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    전역 예외 핸들러

    예상치 못한 오류 처리
    """
    logger.error(f"예상치 못한 오류: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "message": "서버 내부 오류가 발생했습니다",
            "detail": str(exc) if settings.DEBUG else "Internal Server Error",
        },
    )


# ========== Development Server ==========

if __name__ == "__main__":
    import uvicorn

    logger.info("개발 서버 시작...")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True,
        # WebSocket 설정
        ws_ping_interval=20.0,  # 20초마다 ping
        ws_ping_timeout=20.0,  # 20초 timeout
        # 세션이 프로세스 메모리에 있으므로 단일 worker
        workers=1,
        timeout_keep_alive=30,
    )
