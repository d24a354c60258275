"""Unit tests for the approval endpoint."""

from urllib.parse import parse_qs, urlsplit

from oauth_core.core.auth.oauth2.errors import ClientError, ResourceOwnerError
from oauth_core.schemas.oauth import (
    ApprovalDecision,
    AskApproval,
    AuthorizeRequest,
    Redirect,
)
from tests.fixtures.test_data import WEB_CLIENT


def _request(**params: str) -> AuthorizeRequest:
    return AuthorizeRequest.from_params(params)


class TestApprove:
    """Tests for recording the resource owner's decision."""

    def test_first_approval_issues_code(self, server, resource_owner, storage):
        """Test approving stores the approval and completes the request."""
        request = _request(client_id="webapp1", response_type="code", scope="read write", state="s")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read write", approval="Approve")
        )
        outcome = result.unwrap()
        assert isinstance(outcome, Redirect)
        params = parse_qs(urlsplit(outcome.url).query)
        assert params["state"] == ["s"]
        assert "code" in params
        assert storage.get_approval("webapp1", "alice").scope == "read write"

    def test_no_second_prompt(self, server, resource_owner):
        """Test an approved scope or a narrower one does not ask again."""
        request = _request(client_id="webapp1", response_type="code", scope="read write")
        server.approve(
            resource_owner, request, ApprovalDecision(scope="read write", approval="Approve")
        )
        for scope in ("read write", "write", "read"):
            result = server.authorize(resource_owner, request.with_scope(scope))
            assert isinstance(result.unwrap(), Redirect)

    def test_partial_approval(self, server, resource_owner, storage):
        """Test the owner may approve a subset of the requested scope."""
        request = _request(client_id="webapp1", response_type="code", scope="read write")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read", approval="Approve")
        )
        assert isinstance(result.unwrap(), Redirect)
        assert storage.get_approval("webapp1", "alice").scope == "read"

        code = parse_qs(urlsplit(result.unwrap().url).query)["code"][0]
        assert storage.get_authorization_code(code, None).scope == "read"

    def test_approval_is_merged(self, server, resource_owner, storage):
        """Test a new approval extends the stored one."""
        storage.add_approval("webapp1", "alice", "read")
        request = _request(client_id="webapp1", response_type="code", scope="write foo")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="foo write", approval="Approve")
        )
        assert isinstance(result.unwrap(), Redirect)
        assert storage.get_approval("webapp1", "alice").scope == "foo read write"

    def test_approval_never_shrinks(self, server, resource_owner, storage):
        """Test approving a covered scope leaves storage untouched."""
        storage.add_approval("webapp1", "alice", "read write")
        request = _request(client_id="webapp1", response_type="code", scope="read foo")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read", approval="Approve")
        )
        assert isinstance(result.unwrap(), Redirect)
        assert storage.get_approval("webapp1", "alice").scope == "read write"

    def test_already_approved_short_circuits(self, server, resource_owner, storage):
        """Test the decision is ignored when no approval is needed."""
        storage.add_approval("webapp1", "alice", "read")
        request = _request(client_id="webapp1", response_type="code", scope="read")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read", approval="Deny")
        )
        assert isinstance(result.unwrap(), Redirect)

    def test_scope_beyond_request(self, server, resource_owner, storage):
        """Test the posted scope must be a subset of the requested scope."""
        request = _request(client_id="webapp1", response_type="code", scope="read", state="s")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read write", approval="Approve")
        )
        error = result.unwrap_err()
        assert isinstance(error, ClientError)
        assert error.error == "invalid_scope"
        assert error.client == WEB_CLIENT
        assert error.state == "s"
        assert storage.get_approval("webapp1", "alice") is None

    def test_missing_posted_scope(self, server, resource_owner):
        """Test approving without a scope fails closed."""
        request = _request(client_id="webapp1", response_type="code", scope="read")
        result = server.approve(resource_owner, request, ApprovalDecision(approval="Approve"))
        assert result.unwrap_err().error == "invalid_scope"

    def test_denied(self, server, resource_owner, storage):
        """Test denial is reported to the resolved client."""
        request = _request(client_id="webapp1", response_type="code", scope="read", state="s")
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read", approval="Deny")
        )
        error = result.unwrap_err()
        assert isinstance(error, ClientError)
        assert error.error == "access_denied"
        assert error.client == WEB_CLIENT
        assert error.state == "s"
        assert "error=access_denied" in error.redirect_url()
        assert storage.get_approval("webapp1", "alice") is None

    def test_denied_unregistered_client(self, server, resource_owner):
        """Test denial for a synthesized client still carries that client."""
        request = _request(
            client_id="example.org",
            response_type="token",
            redirect_uri="https://example.org/cb",
            scope="read",
        )
        result = server.approve(
            resource_owner, request, ApprovalDecision(scope="read", approval="Deny")
        )
        error = result.unwrap_err()
        assert error.client.id == "example.org"
        assert error.redirect_url().startswith("https://example.org/cb?")

    def test_invalid_request_is_not_recorded(self, server, resource_owner):
        """Test request errors surface before the decision is looked at."""
        result = server.approve(
            resource_owner,
            _request(response_type="code", scope="read"),
            ApprovalDecision(scope="read", approval="Approve"),
        )
        assert isinstance(result.unwrap_err(), ResourceOwnerError)

    def test_implicit_after_approval(self, server, resource_owner, approve_and_redirect):
        """Test approving an implicit request returns a token fragment."""
        params = approve_and_redirect(
            client_id="jsapp1", response_type="token", scope="read"
        )
        assert params["token_type"] == ["bearer"]
        assert len(params["access_token"][0]) == 32

        result = server.authorize(
            resource_owner,
            _request(client_id="jsapp1", response_type="token", scope="read"),
        )
        assert not isinstance(result.unwrap(), AskApproval)
