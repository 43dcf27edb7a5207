"""
Unit tests for the logging helpers.
"""

import json
import logging

from sailor.core.logging import HumanReadableFormatter, StructuredFormatter, resource_context
from sailor.core.models import FetchStrategy, ResourceKind


def make_record(message="poll failed", **extra):
    record = logging.LogRecord("sailor.runner.poller", logging.WARNING, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestResourceContext:

    def test_enum_values(self):
        context = resource_context(ResourceKind.MISC, "banner", FetchStrategy.REMOTE_PULL)

        assert context == {
            "resource_kind": "misc",
            "resource_name": "banner",
            "strategy": "remote_pull",
        }

    def test_unnamed(self):
        assert resource_context(ResourceKind.CONFIG)["resource_name"] is None


class TestFormatters:

    def test_structured(self):
        record = make_record(**resource_context(ResourceKind.CONFIG, "", FetchStrategy.REMOTE_PULL))

        entry = json.loads(StructuredFormatter(include_timestamp=False).format(record))

        assert entry["level"] == "WARNING"
        assert entry["message"] == "poll failed"
        assert entry["resource_kind"] == "config"
        assert "resource_name" not in entry
        assert "timestamp" not in entry

    def test_human_readable(self):
        record = make_record(**resource_context(ResourceKind.SECRET))

        line = HumanReadableFormatter(include_timestamp=False).format(record)

        assert line == "sailor.runner.poller - WARNING - poll failed [resource_kind=secret]"
