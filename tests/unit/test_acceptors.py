"""Tests for waiter acceptor matching."""

import pytest

from servicecall.exceptions import ServiceError, TransportError
from servicecall.models.operation import Acceptor
from servicecall.waiter import Outcome, first_match, matches


def _output(**fields: object) -> dict[str, object]:
    return {**fields, "ResponseMetadata": {"HTTPStatusCode": 200}}


class TestPathMatchers:
    """Tests for path, pathAll and pathAny matchers."""

    def test_path(self) -> None:
        """Test that path compares the searched value with expected."""
        acceptor = Acceptor(state="success", matcher="path", argument="Table.Status", expected="UP")

        assert matches(acceptor, Outcome(output=_output(Table={"Status": "UP"})))
        assert not matches(acceptor, Outcome(output=_output(Table={"Status": "DOWN"})))
        assert not matches(acceptor, Outcome(error=ServiceError("failed")))

    def test_path_all(self) -> None:
        """Test that pathAll needs a non-empty list of matching values."""
        acceptor = Acceptor(
            state="success", matcher="pathAll", argument="Items[].State", expected="ok"
        )

        assert matches(acceptor, Outcome(output=_output(Items=[{"State": "ok"}, {"State": "ok"}])))
        assert not matches(
            acceptor, Outcome(output=_output(Items=[{"State": "ok"}, {"State": "bad"}]))
        )
        assert not matches(acceptor, Outcome(output=_output(Items=[])))

    def test_path_any(self) -> None:
        """Test that pathAny needs at least one matching value."""
        acceptor = Acceptor(
            state="failure", matcher="pathAny", argument="Items[].State", expected="bad"
        )

        assert matches(acceptor, Outcome(output=_output(Items=[{"State": "ok"}, {"State": "bad"}])))
        assert not matches(acceptor, Outcome(output=_output(Items=[{"State": "ok"}])))
        assert not matches(acceptor, Outcome(output=_output()))


class TestStatusAndErrorMatchers:
    """Tests for status and error matchers."""

    def test_status_from_output(self) -> None:
        """Test that status matches the HTTP status of a successful response."""
        acceptor = Acceptor(state="success", matcher="status", expected=200)

        assert matches(acceptor, Outcome(output=_output()))

    def test_status_from_error(self) -> None:
        """Test that status matches the HTTP status of a failed response."""
        acceptor = Acceptor(state="retry", matcher="status", expected=404)

        assert matches(acceptor, Outcome(error=ServiceError("gone", status_code=404)))
        assert not matches(acceptor, Outcome(error=TransportError("reset")))

    def test_error_code(self) -> None:
        """Test that error matches the service error code."""
        acceptor = Acceptor(state="retry", matcher="error", expected="ResourceNotFoundException")

        assert matches(
            acceptor, Outcome(error=ServiceError("x", service_code="ResourceNotFoundException"))
        )
        assert not matches(acceptor, Outcome(error=ServiceError("x", service_code="Throttling")))
        assert not matches(acceptor, Outcome(output=_output()))

    @pytest.mark.parametrize(
        ("expected", "outcome", "result"),
        [
            (True, Outcome(error=TransportError("reset")), True),
            (True, Outcome(output={}), False),
            (False, Outcome(output={}), True),
            (False, Outcome(error=TransportError("reset")), False),
        ],
    )
    def test_boolean_error_expectation(
        self, expected: bool, outcome: Outcome, result: bool
    ) -> None:
        """Test that a boolean expectation means any error or no error."""
        acceptor = Acceptor(state="failure", matcher="error", expected=expected)

        assert matches(acceptor, outcome) is result


class TestFirstMatch:
    """Tests for ordered acceptor evaluation."""

    def test_first_declared_acceptor_wins(self) -> None:
        """Test that acceptors are evaluated in declared order."""
        acceptors = (
            Acceptor(state="failure", matcher="status", expected=200),
            Acceptor(state="success", matcher="status", expected=200),
        )

        match = first_match(acceptors, Outcome(output=_output()))

        assert match is acceptors[0]

    def test_no_match(self) -> None:
        """Test that None is returned when nothing matches."""
        acceptors = (Acceptor(state="success", matcher="status", expected=201),)

        assert first_match(acceptors, Outcome(output=_output())) is None
