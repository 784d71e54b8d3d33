"""
Services Layer

Schedule engine and its collaborators:
- Engine modules (fixture_schedule, trackers, constraint_validator,
  suggestions) work on plain data and never touch the database
- previous_fixture and fixture_finalization read/write SQLModel tables
- Nothing here depends on HTTP request/response objects
"""
