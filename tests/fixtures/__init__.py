"""
Test Fixtures - Shared Test Data and Configurations.

This package contains reusable test fixtures:
    - sample_hooks.yaml: Before/after hook configuration with a
      parallel group, a filtered step and a fault-tolerant step
"""
