"""PixForge 이미지 리사이즈 백엔드 패키지입니다."""
