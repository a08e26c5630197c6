"""
Test suite for the Produce Trade Terminal backend.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_readiness_service.py -v
"""
