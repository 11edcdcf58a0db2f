"""
Integration Tests - End-to-End Pipeline Tests.

These tests verify that configuration loading, building and a hooked
service work together correctly.

Test Files:
    - test_hooked_service.py: Before hooks, operation, after hooks
    - test_yaml_pipeline.py: Pipelines built from a YAML file
"""
