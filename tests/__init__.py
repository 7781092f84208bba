"""Test suite for Folio Sync.

Test structure:
- unit/: Unit tests - domain logic, mappers and handlers in isolation
- integration/: Integration tests - provider adapters over mocked HTTP,
  repository and end-to-end sync against a throwaway SQLite database
"""
