"""
Tests for core/envelope.py — envelope shape and failure mapping.
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.envelope import (
    display_average,
    display_percentage,
    enveloped,
    failure,
    success,
)
from core.errors import EntityNotFound, StoreUnavailable


class TestEnvelope:
    def test_success_shape(self):
        assert success({"count": 0}).to_dict() == {"success": True, "data": {"count": 0}}

    def test_empty_data_is_still_success(self):
        assert success({}).to_dict() == {"success": True, "data": {}}

    def test_failure_shape(self):
        env = failure(EntityNotFound("Student"))
        assert env.to_dict() == {"success": False, "message": "Student not found."}
        assert env.status_code == 404

    def test_display_rounding(self):
        assert display_percentage(66.6666) == 67
        assert display_average(66.6666) == 66.67
        assert display_average(None) is None


class TestEnvelopedDecorator:
    def test_wraps_result(self):
        @enveloped
        def compute():
            return [1, 2]

        assert compute().to_dict() == {"success": True, "data": [1, 2]}

    def test_known_error_keeps_status(self):
        @enveloped
        def compute():
            raise StoreUnavailable()

        env = compute()
        assert env.success is False
        assert env.status_code == 500
        assert env.message == "Internal server error."

    def test_unexpected_error_is_generic(self):
        @enveloped
        def compute():
            raise KeyError("classId")

        env = compute()
        assert env.to_dict() == {"success": False, "message": "Internal server error."}
        assert env.status_code == 500
