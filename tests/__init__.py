"""
xds_scaffold test suite
=======================

Test Modules
------------
- test_models.py: ProjectDescriptor, state enums and settings loading
- test_store.py: Template loading and placeholder scanning
- test_resolver.py: Binding construction and validation
- test_renderer.py: Substitution, file output and verbatim copies
- test_tools.py: git and dependency-sync capabilities
- test_scaffolder.py: The scaffold pipeline end to end
- test_cli.py: Command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run with coverage
    pytest --cov=src/xds_scaffold

    # Skip tests that need a real git binary
    pytest -m "not integration"

    # Run specific test class
    pytest tests/test_scaffolder.py::TestFailures
"""
