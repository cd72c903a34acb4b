"""Tests for request decoding."""

import pytest
from pydantic import ValidationError

from dtconn_relay.models import IngestRequest

from .conftest import make_body


class TestIngestRequest:
    """Test IngestRequest validation."""

    def test_camel_case_fields(self):
        request = IngestRequest.model_validate(make_body())

        assert request.event.event_id == "evt-1"
        assert request.event.target_name == "checkout-service"
        assert request.event.event_type == "PROBLEM_OPEN"
        assert request.event.data == {"n": 1}
        assert request.labels == {"env": "prod"}

    def test_timestamp_kept_verbatim(self):
        body = make_body(event={"timestamp": "yesterday-ish, 25:61"})
        request = IngestRequest.model_validate(body)
        assert request.event.timestamp == "yesterday-ish, 25:61"

    def test_unknown_fields_ignored(self):
        body = make_body(event={"severity": "HIGH"}, extra="ignored")
        request = IngestRequest.model_validate(body)
        assert request.event.event_id == "evt-1"

    def test_nested_data_values(self):
        data = {"list": [1, 2], "nested": {"a": None}, "flag": True}
        request = IngestRequest.model_validate(make_body(event={"data": data}))
        assert request.event.data == data

    @pytest.mark.parametrize(
        "body",
        [
            {"labels": {}},
            {"event": {"eventId": "evt-1"}, "labels": {}},
        ],
    )
    def test_missing_fields(self, body):
        with pytest.raises(ValidationError):
            IngestRequest.model_validate(body)

    def test_missing_event_id(self):
        body = make_body()
        del body["event"]["eventId"]
        with pytest.raises(ValidationError):
            IngestRequest.model_validate(body)

    def test_missing_labels(self):
        body = make_body()
        del body["labels"]
        with pytest.raises(ValidationError):
            IngestRequest.model_validate(body)

    def test_data_must_be_object(self):
        with pytest.raises(ValidationError):
            IngestRequest.model_validate(make_body(event={"data": [1, 2, 3]}))

    def test_label_values_must_be_strings(self):
        with pytest.raises(ValidationError):
            IngestRequest.model_validate(make_body(labels={"retries": 3}))

    def test_timestamp_must_be_string(self):
        with pytest.raises(ValidationError):
            IngestRequest.model_validate(make_body(event={"timestamp": 1714564800}))

    def test_immutable(self):
        request = IngestRequest.model_validate(make_body())
        with pytest.raises(ValidationError):
            request.event.event_id = "evt-2"
