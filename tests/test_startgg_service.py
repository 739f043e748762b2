"""Tests for the start.gg fetch wrapper and GraphQL client."""

from unittest.mock import MagicMock

import pytest
import requests

import query as q
from conftest import make_response
from service.startgg_service import (
    RETRY_DELAY,
    ApiError,
    ConnectivityError,
    GraphQlError,
    RetryExhaustedError,
    StartGGService,
    wrapped_fetch,
)

URL = "https://api.start.gg/gql/alpha"


class TestWrappedFetch:
    def test_success_returns_response(self, session):
        ok = make_response(200)
        session.request.return_value = ok
        sleep = MagicMock()

        assert wrapped_fetch(session, "POST", URL, sleep=sleep) is ok
        session.request.assert_called_once_with("POST", URL)
        sleep.assert_not_called()

    def test_transient_error_then_success_returns_retry(self, session):
        retry = make_response(200, {"data": 2})
        session.request.side_effect = [make_response(503, reason="Service Unavailable"), retry]
        sleep = MagicMock()

        assert wrapped_fetch(session, "POST", URL, sleep=sleep, json={"a": 1}) is retry
        assert session.request.call_count == 2
        assert session.request.call_args_list[1].kwargs == {"json": {"a": 1}}
        sleep.assert_called_once_with(RETRY_DELAY)

    def test_transient_error_twice_raises_retry_exhausted(self, session):
        session.request.side_effect = [
            make_response(503, reason="Service Unavailable"),
            make_response(503, reason="Service Unavailable"),
        ]
        with pytest.raises(RetryExhaustedError) as exc:
            wrapped_fetch(session, "POST", URL, sleep=MagicMock())
        assert exc.value.status_code == 503
        assert str(exc.value) == "503 - Service Unavailable"
        assert session.request.call_count == 2

    def test_retry_reports_the_retry_status(self, session):
        session.request.side_effect = [
            make_response(500, reason="Internal Server Error"),
            make_response(404, reason="Not Found"),
        ]
        with pytest.raises(RetryExhaustedError) as exc:
            wrapped_fetch(session, "POST", URL, sleep=MagicMock())
        assert exc.value.status_code == 404

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_all_transient_statuses_retry(self, session, status):
        session.request.side_effect = [make_response(status), make_response(200)]
        wrapped_fetch(session, "POST", URL, sleep=MagicMock())
        assert session.request.call_count == 2

    def test_other_status_fails_without_retry(self, session):
        session.request.return_value = make_response(404, reason="Not Found")
        sleep = MagicMock()
        with pytest.raises(ApiError) as exc:
            wrapped_fetch(session, "POST", URL, sleep=sleep)
        assert exc.value.status_code == 404
        assert str(exc.value) == "404 - Not Found."
        assert session.request.call_count == 1
        sleep.assert_not_called()

    def test_400_hints_invalid_key(self, session):
        session.request.return_value = make_response(400, reason="Bad Request")
        with pytest.raises(ApiError, match=r"API key invalid"):
            wrapped_fetch(session, "POST", URL)

    def test_401_hints_expired_key(self, session):
        session.request.return_value = make_response(401, reason="Unauthorized")
        with pytest.raises(ApiError, match=r"API key expired"):
            wrapped_fetch(session, "POST", URL)

    def test_transport_failure_is_not_retried(self, session):
        session.request.side_effect = requests.exceptions.ConnectionError("dns")
        with pytest.raises(ConnectivityError) as exc:
            wrapped_fetch(session, "POST", URL, sleep=MagicMock())
        assert isinstance(exc.value.__cause__, requests.exceptions.ConnectionError)
        assert session.request.call_count == 1


class TestStartGGService:
    def test_posts_query_with_bearer_token(self, session):
        session.request.return_value = make_response(200, {"data": {"tournament": None}})
        svc = StartGGService("secret", session=session)

        assert svc.run_query("query X", {"slug": "s"}) == {"tournament": None}
        args, kwargs = session.request.call_args
        assert args == ("POST", URL)
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["json"] == {"query": "query X", "variables": {"slug": "s"}}

    def test_graphql_errors_raise_first_message(self, session):
        session.request.return_value = make_response(
            200, {"errors": [{"message": "first"}, {"message": "second"}], "data": None}
        )
        svc = StartGGService("secret", session=session)
        with pytest.raises(GraphQlError, match="^first$"):
            svc.run_query("query X")

    def test_runs_through_limiter(self, session):
        session.request.return_value = make_response(200, {"data": {}})
        limiter = MagicMock()
        limiter.schedule.side_effect = lambda fn, *args: fn(*args)
        svc = StartGGService("secret", session=session, limiter=limiter)

        svc.run_query("query X", {"a": 1})
        limiter.schedule.assert_called_once()

        svc.run_query("query X", {"a": 1}, rate_limited=False)
        assert limiter.schedule.call_count == 1
        assert session.request.call_count == 2

    def test_requires_api_key(self, session):
        with pytest.raises(ValueError):
            StartGGService("", session=session)


class TestQueries:
    def test_fetch_participant_total(self, session):
        session.request.return_value = make_response(
            200, {"data": {"tournament": {"name": "Only Noobs #2", "participants": {"pageInfo": {"total": 57}}}}}
        )
        svc = StartGGService("secret", session=session)

        assert q.fetch_participant_total(svc, "only-noobs-2") == ("Only Noobs #2", 57)
        assert session.request.call_args.kwargs["json"]["variables"] == {"slug": "only-noobs-2"}

    def test_missing_tournament_raises(self, session):
        session.request.return_value = make_response(200, {"data": {"tournament": None}})
        svc = StartGGService("secret", session=session)
        with pytest.raises(GraphQlError, match="Tournament not found: nope"):
            q.fetch_discriminators(svc, "nope")
