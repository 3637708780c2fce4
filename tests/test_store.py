from argsuggest.models import ParserResult, ShellState
from argsuggest.store import AutocompleteState, AutocompleteStore


def test_set_named_replaces_snapshot():
    store = AutocompleteStore()
    before = store.get()
    after = store.set_named("update_shell_state", lambda _state: {"shell_state": ShellState(cwd="/home")})
    assert after is store.get()
    assert after is not before
    assert before.shell_state.cwd == ""
    assert after.shell_state.cwd == "/home"


def test_generator_states_become_a_tuple():
    store = AutocompleteStore()
    store.set_named("update_parser_result", lambda _state: {"generator_states": [], "parser_result": ParserResult(search_term="a")})
    assert store.get().generator_states == ()
    assert store.get().parser_result.search_term == "a"


def test_empty_update_does_not_notify():
    store = AutocompleteStore(AutocompleteState(shell_state=ShellState(cwd="/")))
    seen = []
    store.subscribe(lambda state, name: seen.append(name))
    before = store.get()
    assert store.set_named("noop", lambda _state: {}) is before
    assert seen == []


def test_failing_listener_does_not_stop_others(mocker):
    store = AutocompleteStore()
    exception = mocker.patch.object(store.log, "exception")
    seen = []

    def broken(_state, _name):
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    store.subscribe(lambda state, name: seen.append(state.shell_state.cwd))
    store.set_named("update_shell_state", lambda _state: {"shell_state": ShellState(cwd="/tmp")})
    assert seen == ["/tmp"]
    exception.assert_called_once()


def test_unsubscribe_twice():
    store = AutocompleteStore()
    unsubscribe = store.subscribe(lambda state, name: None)
    unsubscribe()
    unsubscribe()
