"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- vaults: 금고 / 입출금 기록 / 요약 / 정합 점검
- movements: 개별 입출금 수정·삭제
"""
