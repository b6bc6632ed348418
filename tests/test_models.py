import pytest
from pydantic import ValidationError

from webapi_client.auth import BearerTokenAuth, NoAuth
from webapi_client.formatters import JsonFormatter, XmlFormatter
from webapi_client.models import (
    DEFAULT_BASE_ADDRESS,
    DEFAULT_TIMEOUT,
    ClientOptions,
    ContentType,
    HttpMethod,
)


class TestClientOptions:
    def test_defaults(self):
        options = ClientOptions()

        assert options.base_address == DEFAULT_BASE_ADDRESS
        assert options.controller is None
        assert options.action is None
        assert options.content_type == ContentType.JSON
        assert options.timeout == DEFAULT_TIMEOUT == 30000
        assert isinstance(options.authentication, NoAuth)
        assert options.query_prefix == ""
        assert options.debug is False

    @pytest.mark.parametrize(
        "base_address,expected",
        [
            ("https://api.example.com/api", "https://api.example.com/api/"),
            ("https://api.example.com/api/", "https://api.example.com/api/"),
            ("http://localhost:5000", "http://localhost:5000/"),
        ],
    )
    def test_base_address_ends_with_slash(self, base_address, expected):
        assert ClientOptions(base_address=base_address).base_address == expected

    def test_base_address_normalized_on_assignment(self):
        options = ClientOptions()

        options.base_address = "https://other.example.com"

        assert options.base_address == "https://other.example.com/"

    def test_empty_base_address_rejected(self):
        with pytest.raises(ValidationError):
            ClientOptions(base_address="")

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError):
            ClientOptions(timeout=-1)

    def test_timeout_seconds(self):
        assert ClientOptions(timeout=2500).timeout_seconds == 2.5

    def test_formatter_follows_content_type(self):
        options = ClientOptions()
        assert isinstance(options.formatter, JsonFormatter)

        options.content_type = ContentType.XML

        assert isinstance(options.formatter, XmlFormatter)

    def test_content_type_from_string(self):
        assert ClientOptions(content_type="xml").content_type is ContentType.XML

    def test_authentication_provider(self):
        auth = BearerTokenAuth("abc")

        assert ClientOptions(authentication=auth).authentication is auth

    def test_authentication_must_be_a_provider(self):
        with pytest.raises(ValidationError):
            ClientOptions(authentication="bearer")


class TestEnums:
    def test_media_types(self):
        assert ContentType.JSON.media_type == "application/json"
        assert ContentType.XML.media_type == "application/xml"

    def test_http_methods(self):
        assert [m.value for m in HttpMethod] == ["GET", "POST", "PUT", "DELETE"]
