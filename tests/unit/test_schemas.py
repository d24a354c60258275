"""Unit tests for request and response schemas."""

import pytest
from pydantic import ValidationError

from oauth_core.schemas.oauth import (
    ApprovalDecision,
    AskApproval,
    AuthorizeAction,
    AuthorizeRequest,
    Redirect,
    TokenRequest,
    TokenResponse,
)
from tests.fixtures.test_data import WEB_CLIENT


class TestRequestSchemas:
    """Tests for parameter parsing."""

    def test_empty_values_are_absent(self):
        """Test empty parameters are treated as missing."""
        request = AuthorizeRequest.from_params(
            {"client_id": "webapp1", "response_type": "", "state": ""}
        )
        assert request.client_id == "webapp1"
        assert request.response_type is None
        assert request.state is None

    def test_unknown_parameters_ignored(self):
        """Test parameters outside the schema are dropped."""
        request = TokenRequest.from_params({"grant_type": "refresh_token", "foo": "bar"})
        assert request.grant_type == "refresh_token"

    def test_state_kept_verbatim(self):
        """Test values are not stripped or altered."""
        request = AuthorizeRequest.from_params({"state": " a b "})
        assert request.state == " a b "

    def test_with_scope(self):
        """Test replacing the scope keeps the other parameters."""
        request = AuthorizeRequest(client_id="webapp1", scope="read write")
        narrowed = request.with_scope("read")
        assert narrowed.scope == "read"
        assert narrowed.client_id == "webapp1"
        assert request.scope == "read write"

    @pytest.mark.parametrize(
        ("approval", "approved"),
        [("Approve", True), ("Deny", False), ("approve", False), (None, False)],
    )
    def test_approval_decision(self, approval, approved):
        """Test only the exact value "Approve" grants access."""
        assert ApprovalDecision(scope="read", approval=approval).approved is approved


class TestOutcomes:
    """Tests for authorize outcomes."""

    def test_actions(self):
        """Test each outcome carries its action tag."""
        assert AskApproval(client=WEB_CLIENT).action is AuthorizeAction.ASK_APPROVAL
        assert Redirect(url="https://a/cb?code=x").action is AuthorizeAction.REDIRECT

    def test_action_is_fixed(self):
        """Test an outcome cannot carry the other action."""
        with pytest.raises(ValidationError):
            Redirect(action=AuthorizeAction.ASK_APPROVAL, url="https://a/cb")


class TestTokenResponse:
    """Tests for the token endpoint response body."""

    def test_without_refresh_token(self):
        """Test the refresh token is omitted when not issued."""
        response = TokenResponse(access_token="a", expires_in=60, scope="read")
        assert response.to_dict() == {
            "access_token": "a",
            "token_type": "bearer",
            "expires_in": 60,
            "scope": "read",
        }

    def test_with_refresh_token(self):
        """Test the refresh token is included when issued."""
        response = TokenResponse(
            access_token="a", expires_in=60, scope="read", refresh_token="r"
        )
        assert response.to_dict()["refresh_token"] == "r"
