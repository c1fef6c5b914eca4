"""
타입 정의 모듈

애플리케이션 전역 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class AppMode(str, Enum):
    """실행 모드 (실운영 / 샌드박스)"""

    PRODUCTION = "production"
    SANDBOX = "sandbox"
