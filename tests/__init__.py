"""
Test suite for notion-sync.

This package contains:
- Unit tests for the resolver, planner, executor and codecs
- Engine tests running against in-memory Reminders and Notion fakes
- Mocked tests that work without EventKit or network access
"""
