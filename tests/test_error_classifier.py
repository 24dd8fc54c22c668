"""Tests for error detail extraction and HTTP status classification."""

import pytest

from core.domain.errors import (
    ClientHTTPError,
    ErrorCategory,
    HTTPStatusError,
    ServerHTTPError,
)
from core.services.error_classifier import (
    AUTHENTICATION_MESSAGE,
    NOT_FOUND_MESSAGE,
    UNKNOWN_ERROR,
    build_http_error,
    categorize_status,
    classify,
    extract_error_detail,
)


# ===========================================================================
# extract_error_detail
# ===========================================================================


class TestExtractErrorDetail:

    @pytest.mark.parametrize("body", [None, "", b"", {}, []])
    def test_empty_bodies(self, body):
        assert extract_error_detail(body) == UNKNOWN_ERROR

    def test_detail_wins(self):
        body = {"detail": "Not allowed", "error": "other", "title": ["x"]}
        assert extract_error_detail(body) == "Not allowed"

    def test_error_key(self):
        assert extract_error_detail({"error": "Bad thing"}) == "Bad thing"

    def test_non_field_errors_joined(self):
        body = {"non_field_errors": ["first", "second"]}
        assert extract_error_detail(body) == "first, second"

    def test_field_errors(self):
        body = {"name": ["This field is required."], "color": "invalid"}
        assert extract_error_detail(body) == "name: This field is required.; color: invalid"

    def test_json_string_is_parsed(self):
        assert extract_error_detail('{"detail": "From string"}') == "From string"

    def test_bytes_are_decoded(self):
        assert extract_error_detail(b'{"error": "From bytes"}') == "From bytes"

    def test_plain_text_returned_verbatim(self):
        assert extract_error_detail("Gateway exploded") == "Gateway exploded"

    def test_json_encoded_string(self):
        assert extract_error_detail('"just a message"') == "just a message"

    def test_unrecognised_shape_serialised(self):
        assert extract_error_detail({"count": 3}) == '{"count":3}'
        assert extract_error_detail([1, 2]) == "[1,2]"

    def test_custom_matchers(self):
        def match_message(body):
            return body.get("message")

        assert extract_error_detail({"message": "custom"}, matchers=(match_message,)) == "custom"


# ===========================================================================
# classify / categorize_status
# ===========================================================================


class TestClassify:

    @pytest.mark.parametrize(
        "status, category",
        [
            (400, ErrorCategory.BAD_REQUEST),
            (401, ErrorCategory.AUTHENTICATION),
            (403, ErrorCategory.PERMISSION_DENIED),
            (404, ErrorCategory.NOT_FOUND),
            (409, ErrorCategory.CONFLICT),
            (413, ErrorCategory.PAYLOAD_TOO_LARGE),
            (429, ErrorCategory.RATE_LIMITED),
            (500, ErrorCategory.SERVER_ERROR),
            (502, ErrorCategory.SERVER_ERROR),
            (503, ErrorCategory.SERVER_ERROR),
            (504, ErrorCategory.SERVER_ERROR),
            (418, ErrorCategory.HTTP_ERROR),
            (501, ErrorCategory.HTTP_ERROR),
        ],
    )
    def test_categories(self, status, category):
        assert categorize_status(status) is category

    def test_401_does_not_leak_remote_detail(self):
        message = classify(401, {"detail": "Invalid token header. secret-ish"})
        assert message == AUTHENTICATION_MESSAGE
        assert "secret-ish" not in message

    def test_404_fixed_message(self):
        assert classify(404, {"detail": "No Document matches."}) == NOT_FOUND_MESSAGE

    def test_400_includes_detail(self):
        message = classify(400, {"title": ["Too long"]})
        assert message == "Bad request: title: Too long. Please check your input parameters."

    def test_403_includes_detail(self):
        message = classify(403, {"detail": "You do not have permission."})
        assert message.startswith("Permission denied: You do not have permission.")

    def test_409_includes_detail(self):
        assert classify(409, {"error": "Exists"}).startswith("Conflict: Exists.")

    def test_server_error_mentions_status(self):
        assert "HTTP 503" in classify(503, "<html>busy</html>")

    def test_other_status(self):
        assert classify(418, "I'm a teapot") == "HTTP 418 error: I'm a teapot"


# ===========================================================================
# build_http_error
# ===========================================================================


class TestBuildHttpError:

    def test_client_error(self):
        err = build_http_error(404, {"detail": "gone"})
        assert isinstance(err, ClientHTTPError)
        assert err.status_code == 404
        assert err.category is ErrorCategory.NOT_FOUND
        assert err.response_body == {"detail": "gone"}

    def test_server_error(self):
        err = build_http_error(500, None)
        assert isinstance(err, ServerHTTPError)
        assert err.category is ErrorCategory.SERVER_ERROR

    def test_unusual_status(self):
        err = build_http_error(302, None)
        assert type(err) is HTTPStatusError
        assert err.category is ErrorCategory.HTTP_ERROR
        assert str(err) == "HTTP 302 error: Unknown error"
