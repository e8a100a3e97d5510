"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- ledger: 거래 목록/요약/내보내기
- config: 설정 조회
"""
