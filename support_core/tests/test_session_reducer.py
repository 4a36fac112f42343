from support_core.domain.models import ChatMessage, CompletionFailure, CompletionSuccess, ErrorKind
from support_core.domain.session import (
    TRANSIENT_ERROR_TEXT,
    CompletionResolved,
    ReferralIssued,
    RequestState,
    SessionReset,
    UtteranceSubmitted,
    initial_state,
    reduce,
)


def test_initial_state_holds_disclaimer():
    state = initial_state("hello")
    assert state.history == (ChatMessage(role="assistant", content="hello"),)
    assert state.request_state is RequestState.IDLE
    assert state.last_error is None


def test_submit_moves_to_pending_and_clears_error():
    state = initial_state("hello")
    state = reduce(state, UtteranceSubmitted("hi"))
    state = reduce(state, CompletionResolved(0, CompletionFailure(ErrorKind.UNKNOWN), "sorry"))
    assert state.last_error == TRANSIENT_ERROR_TEXT

    state = reduce(state, UtteranceSubmitted("again"))
    assert state.is_pending
    assert state.last_error is None
    assert state.history[-1] == ChatMessage(role="user", content="again")


def test_submit_while_pending_is_noop():
    state = reduce(initial_state("hello"), UtteranceSubmitted("one"))
    assert reduce(state, UtteranceSubmitted("two")) is state


def test_referral_only_applies_when_pending():
    idle = initial_state("hello")
    assert reduce(idle, ReferralIssued("call")) is idle

    pending = reduce(idle, UtteranceSubmitted("I want to die"))
    state = reduce(pending, ReferralIssued("call"))
    assert state.request_state is RequestState.IDLE
    assert [m.role for m in state.history] == ["assistant", "user", "assistant"]
    assert state.history[-1].content == "call"


def test_completion_success():
    pending = reduce(initial_state("hello"), UtteranceSubmitted("hi"))
    state = reduce(pending, CompletionResolved(0, CompletionSuccess("hey"), "hey"))
    assert not state.is_pending
    assert state.last_error is None
    assert state.history[-1] == ChatMessage(role="assistant", content="hey")


def test_stale_completion_is_dropped():
    pending = reduce(initial_state("hello"), UtteranceSubmitted("hi"))
    reset = reduce(pending, SessionReset("hello"))
    assert reset.generation == 1
    assert reduce(reset, CompletionResolved(0, CompletionSuccess("late"), "late")) is reset

    # 重置后的新请求在途时，旧结果同样被丢弃
    fresh = reduce(reset, UtteranceSubmitted("new"))
    assert reduce(fresh, CompletionResolved(0, CompletionSuccess("late"), "late")) is fresh


def test_reset_from_any_state():
    pending = reduce(initial_state("hello"), UtteranceSubmitted("hi"))
    state = reduce(pending, SessionReset("hello"))
    assert len(state.history) == 1
    assert state.request_state is RequestState.IDLE
    assert state.last_error is None


def test_reset_is_idempotent_apart_from_generation():
    once = reduce(initial_state("hello"), SessionReset("hello"))
    twice = reduce(once, SessionReset("hello"))
    assert twice.history == once.history
    assert twice.request_state == once.request_state
    assert twice.last_error == once.last_error
