"""
FlowJournal test suite.

- tests/unit/ - pure domain logic, security and client tests
- tests/integration/ - services against SQLite and HTTP flows through the app

Run all tests: pytest
Skip database tests: pytest -m "not integration"
"""
