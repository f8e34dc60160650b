import os
from dotenv import load_dotenv

load_dotenv()  # 환경변수 읽어오기


class Settings:
    PROJECT_NAME: str = "TimeTOGO Navigation Backend"
    VERSION: str = "1.2.0"

    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    PORT: int = int(os.getenv("PORT", 5001))

    REDIS_HOST: str = os.getenv("REDIS_HOST", "redis")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))

    # 경로 계산 API (lambda)
    ROUTE_API_URL: str = os.getenv("ROUTE_API_URL", "http://localhost:5001/mock")
    ROUTE_API_TIMEOUT_SECONDS: float = float(
        os.getenv("ROUTE_API_TIMEOUT_SECONDS", 30)
    )

    # 도보 상세 경로 API (TMap 보행자 경로)
    WALKING_PATH_API_URL: str = os.getenv(
        "WALKING_PATH_API_URL",
        "https://apis.openapi.sk.com/tmap/routes/pedestrian?version=1",
    )
    WALKING_PATH_APP_KEY: str = os.getenv("WALKING_PATH_APP_KEY", "")
    WALKING_PATH_TIMEOUT_SECONDS: float = float(
        os.getenv("WALKING_PATH_TIMEOUT_SECONDS", 10)
    )
    # 도보 경로 캐시 TTL
    WALKING_PATH_CACHE_TTL_SECONDS: int = int(
        os.getenv("WALKING_PATH_CACHE_TTL_SECONDS", 86400)
    )  # 1일 => 보행 경로는 자주 바뀌지 않음

    # 경로 공유 API
    SHARE_API_URL: str = os.getenv("SHARE_API_URL", "http://localhost:5001")
    SHARE_API_TIMEOUT_SECONDS: float = float(
        os.getenv("SHARE_API_TIMEOUT_SECONDS", 10)
    )
    SHARE_MIN_MOVE_METERS: float = float(os.getenv("SHARE_MIN_MOVE_METERS", 10))

    # 실시간 추적 임계값
    NAVIGATION_START_DISTANCE_METERS: float = float(
        os.getenv("NAVIGATION_START_DISTANCE_METERS", 10)
    )
    TRANSFER_PROXIMITY_METERS: float = float(
        os.getenv("TRANSFER_PROXIMITY_METERS", 50)
    )

    # 나침반 스무딩
    HEADING_SMOOTHING_FACTOR: float = float(
        os.getenv("HEADING_SMOOTHING_FACTOR", 0.2)
    )  # EMA 계수
    HEADING_MAX_DELTA_DEGREES: float = float(
        os.getenv("HEADING_MAX_DELTA_DEGREES", 5)
    )  # 한 번에 최대 회전량(°)

    # 안내 문구 언어 (en / ko)
    GUIDANCE_LANGUAGE: str = os.getenv("GUIDANCE_LANGUAGE", "en")

    # 요청 소요 시간 로깅
    ENABLE_REQUEST_TIMING: bool = (
        os.getenv("ENABLE_REQUEST_TIMING", "True").lower() == "true"
    )
    SLOW_REQUEST_THRESHOLD_MS: float = float(
        os.getenv("SLOW_REQUEST_THRESHOLD_MS", 3000)
    )  # 경로 계산 API는 수 초 걸릴 수 있음

    # CORS 설정
    ALLOWED_ORIGINS: list[str] = os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:8081,http://localhost:19006,http://127.0.0.1:8081",
    ).split(",")


settings = Settings()  # 모듈화


# TMap turnType 중 안내 대상에서 제외하는 출발/도착 마커
ORIGIN_MARKER_TURN_TYPE = 200
DESTINATION_MARKER_TURN_TYPE = 201
EXCLUDED_TURN_TYPES = {ORIGIN_MARKER_TURN_TYPE, DESTINATION_MARKER_TURN_TYPE}

# turnType => 방향 안내 문구
TURN_TYPE_LABELS = {
    "en": {
        11: "go straight",
        12: "turn left",
        13: "turn right",
        14: "make a U-turn",
        16: "8 o'clock direction",
        17: "10 o'clock direction",
        18: "2 o'clock direction",
        19: "4 o'clock direction",
        125: "overpass",
        126: "underpass",
        211: "crosswalk",
        212: "crosswalk on the left",
        213: "crosswalk on the right",
        214: "crosswalk at 8 o'clock",
        215: "crosswalk at 10 o'clock",
        216: "crosswalk at 2 o'clock",
        217: "crosswalk at 4 o'clock",
    },
    "ko": {
        11: "직진",
        12: "좌회전",
        13: "우회전",
        14: "유턴",
        16: "8시 방향",
        17: "10시 방향",
        18: "2시 방향",
        19: "4시 방향",
        125: "육교",
        126: "지하보도",
        211: "횡단보도",
        212: "좌측 횡단보도",
        213: "우측 횡단보도",
        214: "8시 방향 횡단보도",
        215: "10시 방향 횡단보도",
        216: "2시 방향 횡단보도",
        217: "4시 방향 횡단보도",
    },
}

# 매핑되지 않은 turnType => 직진
DEFAULT_TURN_LABEL = {"en": "go straight", "ko": "직진"}

GUIDANCE_FORMAT = {
    "en": "{distance}m ahead, {direction}",
    "ko": "{distance}m 앞 {direction}",
}

# 교통수단 유형별 표시 이름
VEHICLE_TYPE_LABELS = {
    "BUS": "버스",
    "SUBWAY": "지하철",
    "TRAM": "트램",
    "HEAVY_RAIL": "기차",
    "LIGHT_RAIL": "경전철",
    "WALKING": "도보",
}
DEFAULT_VEHICLE_LABEL = "대중교통"

# OpenWeather 날씨 타입 => 앱 내부 날씨 상태
WEATHER_CONDITIONS = {
    "clear": "sunny",
    "clouds": "cloudy",
    "rain": "rainy",
    "drizzle": "rainy",
    "snow": "snowy",
}
