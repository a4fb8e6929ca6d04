"""설정/로깅/예외/DB 등 공통 인프라 패키지."""
