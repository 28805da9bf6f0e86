"""요구사항 문서를 개발 작업(Task) 목록으로 변환하는 컴파일러 패키지."""

__version__ = "1.0.0"
