"""상품 카탈로그 검색/랭킹 엔진 + 캐시 데코레이터"""

__version__ = "1.0.0"
