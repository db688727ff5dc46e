import pytest

from instproxy.core.errors import ProtocolError
from instproxy.core.interpreter import interpret
from instproxy.core.models.response import ErrorReport, Signal


@pytest.mark.ut
def test_list_and_completion_coexist():
    message = interpret({"CurrentList": [{"a": 1}, {"b": 2}], "Status": "Complete"})

    assert message.list_chunk == [{"a": 1}, {"b": 2}]
    assert message.complete is True
    assert message.terminal is True
    assert message.error is None
    assert message.percent_complete is None


@pytest.mark.ut
def test_error_with_description():
    message = interpret({"Error": "APIInternalError", "ErrorDescription": "boom"})

    assert message.error == ErrorReport("APIInternalError", "boom")
    assert message.terminal is True
    assert message.complete is False


@pytest.mark.ut
def test_error_without_description():
    message = interpret({"Error": "E1"})

    assert message.error == ErrorReport("E1", None)


@pytest.mark.ut
def test_progress_with_intermediate_status_is_not_terminal():
    message = interpret({"PercentComplete": 40, "Status": "InstallingApplication"})

    assert message.percent_complete == 40
    assert message.status == "InstallingApplication"
    assert message.complete is False
    assert message.terminal is False


@pytest.mark.ut
def test_empty_message_has_no_parts():
    message = interpret({})

    assert message.primary_signal() is Signal.NONE
    assert message.terminal is False


@pytest.mark.ut
@pytest.mark.parametrize("raw,expected", [
    ({"Error": "E", "PercentComplete": 5, "Status": "Complete", "CurrentList": []}, Signal.ERROR),
    ({"PercentComplete": 5, "Status": "Complete", "CurrentList": []}, Signal.PROGRESS),
    ({"Status": "Complete", "CurrentList": [1]}, Signal.COMPLETE),
    ({"CurrentList": [1]}, Signal.LIST),
])
def test_primary_signal_precedence(raw, expected):
    assert interpret(raw).primary_signal() is expected


@pytest.mark.ut
def test_all_parts_retained_alongside_error():
    message = interpret({
        "Error": "E",
        "PercentComplete": 5,
        "Status": "Complete",
        "CurrentList": [1],
    })

    assert message.list_chunk == [1]
    assert message.percent_complete == 5
    assert message.complete is True


@pytest.mark.ut
def test_non_mapping_is_rejected():
    with pytest.raises(ProtocolError):
        interpret(["not", "a", "dict"])


@pytest.mark.ut
def test_invalid_percent_is_rejected():
    with pytest.raises(ProtocolError):
        interpret({"PercentComplete": "lots"})
