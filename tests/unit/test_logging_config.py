"""
Unit tests for logging configuration processors.
"""

import logging

from fault_tolerance.logging_config import app_context, configure_logging, tag_component


def test_app_context_stamps_service_and_environment():
    add_context = app_context("orders-gateway", "staging")

    event = add_context(None, "info", {"event": "hello"})

    assert event["app"] == "orders-gateway"
    assert event["env"] == "staging"


def test_tag_component_from_resilience_keys():
    assert tag_component(None, "warning", {"breaker": "upstream"})["component"] == "circuit_breaker"
    assert tag_component(None, "warning", {"executor": "default"})["component"] == "retry"
    assert tag_component(None, "warning", {"accessor": "upstream"})["component"] == "fallback"
    assert "component" not in tag_component(None, "info", {"event": "plain"})


def test_tag_component_keeps_explicit_value():
    event = tag_component(None, "info", {"breaker": "upstream", "component": "custom"})

    assert event["component"] == "custom"


def test_configure_logging_sets_levels():
    configure_logging("DEBUG", "production")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("nonsense", "development")

    assert logging.getLogger().level == logging.INFO
