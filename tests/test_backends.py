"""Tests for the template, script and custom back-ends."""

import asyncio
import os

import pytest

from argsuggest.backends.custom import get_custom_suggestions
from argsuggest.backends.script import get_script_suggestions, parse_script_output
from argsuggest.backends.template import get_template_suggestions, resolve_directory
from argsuggest.builtin_generators import filepaths, folders, query_after_last_slash
from argsuggest.caches import Cache
from argsuggest.models import (
    Generator,
    GeneratorCache,
    GeneratorContext,
    ScriptError,
    ScriptTimeout,
    Suggestion,
    SuggestionType,
)
from argsuggest.process import CommandOutput


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("")
    (tmp_path / "README.md").write_text("")
    (tmp_path / "setup.py").write_text("")
    (tmp_path / "Makefile").write_text("")
    return tmp_path


def names(suggestions):
    return [s.name for s in suggestions]


# script


@pytest.mark.asyncio
async def test_script_lines():
    suggestions = await get_script_suggestions(Generator(script="printf 'a\\n\\nb\\n'"), GeneratorContext(), 5000)
    assert names(suggestions) == ["a", "b"]
    assert all(s.type == SuggestionType.ARG for s in suggestions)


@pytest.mark.asyncio
async def test_script_split_on():
    suggestions = await get_script_suggestions(Generator(script="printf 'a,b,c'", split_on=","), GeneratorContext(), 5000)
    assert names(suggestions) == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_script_function_and_post_process():
    def script(tokens):
        return ["printf", "%s", " ".join(tokens)]

    def post_process(output, tokens):
        return [Suggestion(name=word.upper(), description=str(len(tokens))) for word in output.split()]

    generator = Generator(script=script, post_process=post_process)
    suggestions = await get_script_suggestions(generator, GeneratorContext(token_array=("git", "co")), 5000)
    assert names(suggestions) == ["GIT", "CO"]
    assert suggestions[0].description == "2"


@pytest.mark.asyncio
async def test_script_runs_in_context_directory(tree):
    context = GeneratorContext(current_working_directory=str(tree))
    suggestions = await get_script_suggestions(Generator(script="ls"), context, 5000)
    assert names(suggestions) == ["Makefile", "README.md", "setup.py", "src"]


@pytest.mark.asyncio
async def test_script_errors():
    with pytest.raises(ScriptError):
        await get_script_suggestions(Generator(script="exit 3"), GeneratorContext(), 5000)
    with pytest.raises(ScriptTimeout):
        await get_script_suggestions(Generator(script="sleep 10"), GeneratorContext(), 100)


@pytest.mark.asyncio
async def test_empty_script_command():
    generator = Generator(script=lambda _tokens: "")
    assert await get_script_suggestions(generator, GeneratorContext(), 5000) == []


def test_parse_script_output_strings():
    generator = Generator(script="x", post_process=lambda out, _tokens: out.split("|"))
    suggestions = parse_script_output(generator, "a|b", ())
    assert suggestions == [Suggestion(name="a"), Suggestion(name="b")]


@pytest.mark.asyncio
async def test_script_cache(mocker):
    run = mocker.patch(
        "argsuggest.backends.script.run_command",
        return_value=CommandOutput(stdout="a\nb\n", stderr="", returncode=0),
    )
    cache = Cache("script_output")
    generator = Generator(script="ls", cache=GeneratorCache())

    first = await get_script_suggestions(generator, GeneratorContext(), 5000, cache)
    second = await get_script_suggestions(generator, GeneratorContext(), 5000, cache)
    assert names(first) == names(second) == ["a", "b"]
    assert run.await_count == 1

    cache.clear()
    await get_script_suggestions(generator, GeneratorContext(), 5000, cache)
    assert run.await_count == 2


@pytest.mark.asyncio
async def test_script_cache_by_directory(mocker):
    run = mocker.patch(
        "argsuggest.backends.script.run_command",
        return_value=CommandOutput(stdout="x\n", stderr="", returncode=0),
    )
    cache = Cache()
    generator = Generator(script="ls", cache=GeneratorCache(cache_by_directory=True))

    await get_script_suggestions(generator, GeneratorContext(current_working_directory="/a"), 5000, cache)
    await get_script_suggestions(generator, GeneratorContext(current_working_directory="/b"), 5000, cache)
    await get_script_suggestions(generator, GeneratorContext(current_working_directory="/a"), 5000, cache)
    assert run.await_count == 2
    assert len(cache) == 2


@pytest.mark.asyncio
async def test_script_cache_expires(mocker):
    run = mocker.patch(
        "argsuggest.backends.script.run_command",
        return_value=CommandOutput(stdout="x\n", stderr="", returncode=0),
    )
    cache = Cache()
    generator = Generator(script="ls", cache=GeneratorCache(ttl_ms=20))

    await get_script_suggestions(generator, GeneratorContext(), 5000, cache)
    await asyncio.sleep(0.05)
    await get_script_suggestions(generator, GeneratorContext(), 5000, cache)
    assert run.await_count == 2


@pytest.mark.asyncio
async def test_script_cache_discards_failures(mocker):
    run = mocker.patch("argsuggest.backends.script.run_command", side_effect=ScriptError("ls", 2))
    cache = Cache()
    generator = Generator(script="ls", cache=GeneratorCache())

    for _ in range(2):
        with pytest.raises(ScriptError):
            await get_script_suggestions(generator, GeneratorContext(), 5000, cache)
    assert run.await_count == 2


@pytest.mark.asyncio
async def test_uncached_script_without_cache_setting(mocker):
    run = mocker.patch(
        "argsuggest.backends.script.run_command",
        return_value=CommandOutput(stdout="x\n", stderr="", returncode=0),
    )
    cache = Cache()
    for _ in range(2):
        await get_script_suggestions(Generator(script="ls"), GeneratorContext(), 5000, cache)
    assert run.await_count == 2
    assert len(cache) == 0


# custom


@pytest.mark.asyncio
async def test_custom_sync():
    calls = []

    def custom(tokens, execute_command, context):
        calls.append((tokens, context.search_term))
        return ["one", Suggestion(name="two", priority=90)]

    context = GeneratorContext(token_array=("cmd", "x"), search_term="x")
    suggestions = await get_custom_suggestions(Generator(custom=custom), context, 5000)
    assert names(suggestions) == ["one", "two"]
    assert suggestions[1].priority == 90
    assert calls == [(["cmd", "x"], "x")]


@pytest.mark.asyncio
async def test_custom_async_with_execute_command(tree):
    async def custom(_tokens, execute_command, _context):
        output = await execute_command("ls")
        return output.split()

    context = GeneratorContext(current_working_directory=str(tree))
    suggestions = await get_custom_suggestions(Generator(custom=custom), context, 5000)
    assert names(suggestions) == ["Makefile", "README.md", "setup.py", "src"]


@pytest.mark.asyncio
async def test_custom_none_result():
    suggestions = await get_custom_suggestions(Generator(custom=lambda *_: None), GeneratorContext(), 5000)
    assert suggestions == []


# templates


def test_resolve_directory(tree):
    context = GeneratorContext(current_working_directory=str(tree), search_term="src/ma")
    assert resolve_directory(context) == os.path.join(str(tree), "src/")
    context = GeneratorContext(current_working_directory=str(tree), search_term="ma")
    assert resolve_directory(context) == str(tree)


@pytest.mark.asyncio
async def test_template_filepaths(tree):
    context = GeneratorContext(current_working_directory=str(tree))
    suggestions = await get_template_suggestions(Generator(template="filepaths"), context)
    assert names(suggestions) == ["Makefile", "README.md", "setup.py", "src/"]
    assert suggestions[-1].type == SuggestionType.FOLDER
    assert suggestions[0].type == SuggestionType.FILE
    assert all(s.context and s.context.template_type for s in suggestions)


@pytest.mark.asyncio
async def test_template_folders(tree):
    context = GeneratorContext(current_working_directory=str(tree))
    suggestions = await get_template_suggestions(Generator(template="folders"), context)
    assert names(suggestions) == ["src/"]


@pytest.mark.asyncio
async def test_template_subdirectory_and_filter(tree):
    context = GeneratorContext(current_working_directory=str(tree), search_term="src/")
    suggestions = await get_template_suggestions(Generator(template=("filepaths",)), context)
    assert names(suggestions) == ["main.py"]

    generator = Generator(template="filepaths", filter_template_suggestions=lambda items: items[:1])
    suggestions = await get_template_suggestions(generator, GeneratorContext(current_working_directory=str(tree)))
    assert names(suggestions) == ["Makefile"]


@pytest.mark.asyncio
async def test_template_missing_directory(tree):
    context = GeneratorContext(current_working_directory=str(tree), search_term="nowhere/")
    assert await get_template_suggestions(Generator(template="filepaths"), context) == []


# builtin generators


def test_query_after_last_slash():
    assert query_after_last_slash("src/ma") == "ma"
    assert query_after_last_slash("ma") == "ma"
    assert query_after_last_slash("a/b/") == ""


async def run_builtin(generator, directory, search_term=""):
    context = GeneratorContext(current_working_directory=str(directory), search_term=search_term)
    suggestions = await generator.custom([], None, context)
    return generator.filter_template_suggestions(suggestions)


@pytest.mark.asyncio
async def test_filepaths_filters(tree):
    assert names(await run_builtin(filepaths(), tree)) == ["Makefile", "README.md", "setup.py", "src/"]
    assert names(await run_builtin(filepaths(extensions=["py"]), tree)) == ["setup.py", "src/"]
    assert names(await run_builtin(filepaths(equals=["Makefile"], show_folders="never"), tree)) == ["Makefile"]
    assert names(await run_builtin(filepaths(matches=r"^[A-Z]"), tree)) == ["Makefile", "README.md", "src/"]
    assert names(await run_builtin(filepaths(extensions=[".py"]), tree, "src/")) == ["main.py"]


@pytest.mark.asyncio
async def test_folders(tree):
    generator = folders()
    assert generator.kind == "custom"
    assert generator.get_query_term is query_after_last_slash
    assert names(await run_builtin(generator, tree)) == ["src/"]


@pytest.mark.asyncio
async def test_root_directory(tree):
    assert names(await run_builtin(filepaths(root_directory="src"), tree)) == ["main.py"]
