"""Pydantic 스키마 패키지입니다."""
