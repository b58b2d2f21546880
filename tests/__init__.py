"""
zkdeploy Test Suite
===================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → Tests for zkdeploy.core (paths, config, models, exceptions)
    ├── test_infrastructure/→ Tests for zkdeploy.infrastructure (node store, path ensurer)
    ├── test_orchestration/ → Tests for zkdeploy.orchestration (revision store)
    ├── test_facade.py      → Tests for the deploy plugin hooks
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_core/         # Run only core tests
"""
