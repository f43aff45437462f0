"""
Test suite for the business abilities load test.

This package contains:
- unit/: fast tests for checks, shapes, hooks, thresholds and the
  scenario iteration, using fakes in place of a running Locust
"""
