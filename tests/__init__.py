"""
Tests package - Test suite for the identity injector.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Sample pods, templates and value producers
"""
