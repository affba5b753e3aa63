"""
Tests for the exception hierarchy.

Tests cover:
- ErrorCode values
- to_dict() serialization
- Inheritance between token errors
- MissingParameterError message and names
- ApiError status and transaction id
"""
import pytest

from tts_cloud.errors import (
    ApiError,
    ConfigurationError,
    ErrorCode,
    MissingParameterError,
    TokenAcquisitionError,
    TokenRefreshError,
    TTSCloudError,
)


class TestErrorCode:

    def test_codes(self):
        assert ErrorCode.CONFIGURATION == "CONFIGURATION"
        assert ErrorCode.TOKEN_ACQUISITION_FAILED == "TOKEN_ACQUISITION_FAILED"
        assert ErrorCode.TOKEN_REFRESH_FAILED == "TOKEN_REFRESH_FAILED"
        assert ErrorCode.MISSING_PARAMETER == "MISSING_PARAMETER"
        assert ErrorCode.API_ERROR == "API_ERROR"


class TestTTSCloudError:

    def test_defaults(self):
        err = TTSCloudError("boom")
        assert err.code == ErrorCode.INTERNAL_ERROR
        assert err.details == {}
        assert str(err) == "boom"

    def test_to_dict_without_details(self):
        assert TTSCloudError("boom").to_dict() == {"ok": False, "error": "INTERNAL_ERROR", "message": "boom"}

    def test_to_dict_with_details(self):
        err = ConfigurationError("no creds", details={"service": "text_to_speech"})
        assert err.to_dict()["details"] == {"service": "text_to_speech"}
        assert err.to_dict()["error"] == "CONFIGURATION"


class TestTokenErrors:

    def test_refresh_error_is_acquisition_error(self):
        err = TokenRefreshError("expired", status_code=400)
        assert isinstance(err, TokenAcquisitionError)
        assert isinstance(err, TTSCloudError)
        assert err.code == ErrorCode.TOKEN_REFRESH_FAILED
        assert err.status_code == 400

    def test_acquisition_error_code(self):
        assert TokenAcquisitionError("nope").code == ErrorCode.TOKEN_ACQUISITION_FAILED


class TestMissingParameterError:

    def test_lists_all_names(self):
        err = MissingParameterError(["customization_id", "word"])
        assert err.missing == ["customization_id", "word"]
        assert str(err) == "Missing required parameters: customization_id, word"
        assert err.details == {"missing": ["customization_id", "word"]}


class TestApiError:

    def test_fields(self):
        err = ApiError("Model not found", 404, transaction_id="tx-1", body={"error": "Model not found"})
        assert err.status_code == 404
        assert err.transaction_id == "tx-1"
        assert err.body == {"error": "Model not found"}
        assert err.to_dict()["details"] == {"status_code": 404, "transaction_id": "tx-1"}

    def test_raises_as_base(self):
        with pytest.raises(TTSCloudError):
            raise ApiError("bad", 500)
