"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계정/계정과목 조회, 일괄 입력
- ledger: 계정 원장
- journals: 분개 전기/초안/반대 분개
- statements: 재무상태표, 기초 잔액 입력
"""
