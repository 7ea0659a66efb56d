"""Tests for wb_common.errors and wb_common.response."""

from src.wb_common.errors import (
    AppError,
    BalanceFetchError,
    ImageDownloadError,
    InternalError,
    InvalidAddressError,
    MissingCredentialError,
    TokenMetadataIncompleteError,
    UnsupportedChainError,
    UnsupportedImageUrlError,
)
from src.wb_common.response import ErrorResponse, error_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="bad chain", http_status=400)
        assert err.http_status == 400

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestErrorSubclasses:
    def test_unsupported_chain(self) -> None:
        err = UnsupportedChainError("solana")
        assert (err.code, err.http_status) == (1001, 400)
        assert "solana" in err.message

    def test_invalid_address(self) -> None:
        err = InvalidAddressError("0xnope")
        assert (err.code, err.http_status) == (1002, 400)

    def test_balance_fetch(self) -> None:
        err = BalanceFetchError("ReadTimeout")
        assert (err.code, err.http_status) == (2001, 502)
        assert "ReadTimeout" in err.message

    def test_metadata_incomplete_names_fields(self) -> None:
        err = TokenMetadataIncompleteError("0xabc", ["symbol", "decimals"])
        assert (err.code, err.http_status) == (2002, 502)
        assert "0xabc" in err.message
        assert "symbol, decimals" in err.message

    def test_image_errors(self) -> None:
        assert UnsupportedImageUrlError("x").http_status == 400
        assert ImageDownloadError("x").code == 3002

    def test_missing_credential(self) -> None:
        err = MissingCredentialError("ALCHEMY_API_KEY")
        assert (err.code, err.http_status) == (9003, 503)
        assert err.message == "ALCHEMY_API_KEY required"

    def test_internal_default_message(self) -> None:
        assert InternalError().message == "Internal server error"


class TestErrorResponse:
    def test_shape(self) -> None:
        resp = error_response(1001, "Unsupported chain: solana")
        assert isinstance(resp, ErrorResponse)
        assert resp.model_dump() == {"error": "Unsupported chain: solana", "code": 1001}
