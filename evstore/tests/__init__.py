"""
Test suite for the event storage engine.

Focus areas:
- Version uniqueness and range reads
- Aggregate listing and page tokens
- Grouped commits and compensation
- Conflict retries in commands
"""
