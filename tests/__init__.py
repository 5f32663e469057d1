"""Test package for the Shapeville geometry tutor.

This package contains unit tests for the deterministic activity engines and
ledger, scripted headless runs of each activity, and UI smoke tests. The UI
tests run headlessly using pygame's dummy video driver to avoid opening real
windows. To run these tests, execute ``pytest`` from the project root.
"""
