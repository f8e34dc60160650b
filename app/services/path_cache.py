import logging
from typing import Dict, Optional

from app.models.domain import WalkingDetailPath

logger = logging.getLogger(__name__)


class WalkingPathCache:
    """
    구간 index => 도보 상세 경로

    fetch 완료 시 쓰고 tracker가 위치 업데이트마다 읽음
    둘 다 같은 이벤트 루프에서 실행되므로 lock 없음
    (OS 스레드에서 쓰려면 lock 필요)
    """

    def __init__(self):
        self._paths: Dict[int, WalkingDetailPath] = {}

    def put(self, leg_index: int, path: WalkingDetailPath):
        self._paths[leg_index] = path
        logger.debug(f"도보 경로 저장: leg={leg_index}, points={len(path.points)}")

    def get(self, leg_index: int) -> Optional[WalkingDetailPath]:
        return self._paths.get(leg_index)

    def __contains__(self, leg_index: int) -> bool:
        return leg_index in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def clear(self):
        self._paths.clear()
