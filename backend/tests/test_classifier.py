import copy

import pytest

from protocol.classifier import is_initialize_request
from tests.fakes import INITIALIZE_BODY, TOOL_CALL_BODY


class TestIsInitializeRequest:

    def test_valid_initialize(self):
        assert is_initialize_request(INITIALIZE_BODY) is True

    def test_other_method(self):
        assert is_initialize_request(TOOL_CALL_BODY) is False

    def test_notification_has_no_id(self):
        body = copy.deepcopy(INITIALIZE_BODY)
        del body["id"]
        assert is_initialize_request(body) is False

    def test_missing_client_info(self):
        body = copy.deepcopy(INITIALIZE_BODY)
        del body["params"]["clientInfo"]
        assert is_initialize_request(body) is False

    def test_wrong_jsonrpc_version(self):
        body = dict(INITIALIZE_BODY, jsonrpc="1.0")
        assert is_initialize_request(body) is False

    @pytest.mark.parametrize("body", [None, "initialize", 42, [INITIALIZE_BODY]])
    def test_non_object_bodies(self, body):
        assert is_initialize_request(body) is False
