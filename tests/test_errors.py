"""
Tests for SDK errors and API error normalization.
"""

import json

import httpx
import pytest
import respx

from ordercloud import Configuration
from ordercloud.errors import (
    ApiError,
    CancellationError,
    ConfigurationError,
    OrderCloudError,
    ValidationError,
    is_cancel,
    is_ordercloud_error,
    normalize_error,
)
from ordercloud.transport import HttpTransport, ResultKind, TransportResult


NOT_FOUND_BODY = {
    "Errors": [
        {
            "ErrorCode": "NotFound",
            "Message": "Object not found",
            "Data": {"ObjectType": "Product", "ObjectID": "abc"},
        }
    ]
}


def _http_error(status: int, data=None, text=None) -> TransportResult:
    request = httpx.Request("GET", "https://api.ordercloud.io/v1/products/abc")
    return TransportResult(
        ResultKind.HTTP_ERROR,
        request=request,
        response=httpx.Response(status, request=request),
        data=data,
        text=text,
    )


class TestErrorHierarchy:
    """Tests for the error classes."""

    def test_all_errors_share_base(self):
        for error in (
            ApiError("boom"),
            CancellationError(),
            ConfigurationError("bad"),
            ValidationError("bad"),
        ):
            assert isinstance(error, OrderCloudError)
            assert is_ordercloud_error(error)

    def test_is_ordercloud_error_rejects_others(self):
        assert not is_ordercloud_error(ValueError("x"))

    def test_is_cancel(self):
        assert is_cancel(CancellationError())
        assert not is_cancel(ApiError("boom"))

    def test_to_dict(self):
        """Test error serialization for logging."""
        error = ApiError("Product abc not found", error_code="NotFound", status=404, status_text="Not Found")

        data = error.to_dict()

        assert data["name"] == "ApiError"
        assert data["code"] == "NotFound"
        assert data["status"] == 404
        assert data["message"] == "Product abc not found"
        assert "timestamp" in data

    def test_repr(self):
        assert repr(ValidationError("bad scope")) == "ValidationError(code='VALIDATION_ERROR', message='bad scope')"


class TestNormalizeError:
    """Tests for normalize_error."""

    def test_not_found_message(self):
        """Test NotFound errors name the missing object."""
        error = normalize_error(_http_error(404, data=NOT_FOUND_BODY))

        assert error.message == "Product abc not found"
        assert error.error_code == "NotFound"
        assert error.status == 404
        assert error.status_text == "Not Found"
        assert len(error.errors) == 1

    def test_first_error_message(self):
        body = {"Errors": [{"ErrorCode": "InvalidCredentials", "Message": "User not found or password incorrect"}]}

        error = normalize_error(_http_error(400, data=body))

        assert error.message == "User not found or password incorrect"
        assert error.error_code == "InvalidCredentials"

    def test_html_body_truncated(self):
        """Test long text bodies are cut to 200 characters."""
        html = "<html><body>" + "x" * 500 + "</body></html>"

        error = normalize_error(_http_error(502, text=html))

        assert error.message == html[:200] + "..."
        assert error.error_code == "OrderCloudError"
        assert error.errors == []

    def test_short_text_body(self):
        error = normalize_error(_http_error(500, text="  Something broke  "))

        assert error.message == "Something broke"

    def test_empty_body_uses_reason_phrase(self):
        error = normalize_error(_http_error(503))

        assert error.message == "Service Unavailable"
        assert error.error_code == "OrderCloudError"

    def test_malformed_errors_list(self):
        """Test a body without a usable Errors list yields no structured errors."""
        error = normalize_error(_http_error(400, data={"Errors": "nope"}))

        assert error.errors == []
        assert error.message == "Bad Request"

    def test_request_type_carried(self):
        error = normalize_error(_http_error(404, data=NOT_FOUND_BODY), request_type="ProductDetail")

        assert error.request_type == "ProductDetail"
        assert error.to_dict()["request_type"] == "ProductDetail"


class TestNormalizeThroughTransport:
    """Tests for error bodies as read from the wire."""

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize("prefix", ["", "\ufeff"])
    async def test_byte_order_mark_ignored(self, prefix: str):
        """Test JSON error bodies parse the same with or without a BOM."""
        respx.get("https://api.ordercloud.io/v1/products/abc").mock(
            return_value=httpx.Response(
                404,
                content=(prefix + json.dumps(NOT_FOUND_BODY)).encode("utf-8"),
                headers={"Content-Type": "application/json; charset=utf-8"},
            )
        )
        transport = HttpTransport(Configuration())

        result = await transport.send("GET", "/products/abc")

        with pytest.raises(ApiError) as exc_info:
            result.unwrap()
        assert exc_info.value.message == "Product abc not found"
        assert exc_info.value.error_code == "NotFound"

        await transport.aclose()

    @pytest.mark.asyncio
    @respx.mock
    async def test_html_gateway_error(self):
        respx.get("https://api.ordercloud.io/v1/me").mock(
            return_value=httpx.Response(502, text="<html>Bad Gateway</html>", headers={"Content-Type": "text/html"})
        )
        transport = HttpTransport(Configuration())

        result = await transport.send("GET", "/me")

        assert result.kind is ResultKind.HTTP_ERROR
        with pytest.raises(ApiError) as exc_info:
            result.unwrap()
        assert exc_info.value.message == "<html>Bad Gateway</html>"
        assert exc_info.value.status == 502

        await transport.aclose()
