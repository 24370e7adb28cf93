"""
Tests for the log filter that masks emails and phone numbers.
"""
import logging

import pytest

from user_service.main import SensitiveDataFilter


def _filtered(msg, *args):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)
    SensitiveDataFilter().filter(record)
    return record.getMessage()


def test_masks_email_local_part():
    assert _filtered("Creating user with email: john.doe@example.com") == (
        "Creating user with email: j***@example.com"
    )


@pytest.mark.parametrize("phone", ["+1-555-123-4567", "(555) 123-4567", "555 123 4567"])
def test_masks_phone_numbers(phone):
    assert _filtered("Cache hit for phone number %s", phone) == "Cache hit for phone number ***67"


@pytest.mark.parametrize("message", [
    "Started at 2026-10-19 20:51:16.77",
    "Expires '2026-10-19T20:51:16'",
    "Cached user 550e8400-e29b-41d4-a716-446655440000",
    "Retrieved page 3 (20 of 143 users)",
    "Took 1234.56 ms",
])
def test_leaves_dates_ids_and_numbers_alone(message):
    assert _filtered(message) == message
