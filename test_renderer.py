import asyncio

from rich.console import Console

from tell.core.llm_client import Batch, Fragment, Session
from tell.core.renderer import StreamRenderer


def stream_of(*batches):
    async def gen():
        for batch in batches:
            yield batch

    return gen()


def batch(*texts, context=None):
    fragments = [Fragment(text) for text in texts]
    if context is not None:
        fragments.append(Fragment("", context=context))
    return Batch(fragments=fragments)


def test_each_fragment_is_flushed_in_order(renderer, out_file):
    asyncio.run(renderer.consume(stream_of(batch("Hel"), batch("lo"))))

    # rich flushes on print too, so drop repeated snapshots
    snapshots = list(dict.fromkeys(out_file.snapshots))
    assert snapshots == ["Hel", "Hello", "Hello\n"]


def test_error_batch_is_reported_and_skipped(renderer, out_file, err_file):
    stream = stream_of(batch("first "), Batch(error=RuntimeError("boom")), batch("third"))

    asyncio.run(renderer.consume(stream))

    assert out_file.getvalue() == "first third\n"
    assert err_file.getvalue() == "Error during generation: boom\n"


def test_no_trailing_newline_without_output(renderer, out_file, err_file):
    asyncio.run(renderer.consume(stream_of(Batch(error=RuntimeError("down")))))

    assert out_file.getvalue() == ""
    assert "down" in err_file.getvalue()


def test_consume_returns_last_context(renderer):
    stream = stream_of(batch("a", context=[1]), batch("b", context=[1, 2]))

    session = asyncio.run(renderer.consume(stream))

    assert session == Session(context=[1, 2])


def test_consume_keeps_session_without_context(renderer):
    start = Session(context=[9])

    assert asyncio.run(renderer.consume(stream_of(batch("x")), start)) is start


def test_inline_markdown_styles():
    renderer = StreamRenderer()
    console = Console(color_system="truecolor")

    text = renderer.render_inline("**hi** there *x* `y`")

    assert text.plain == "hi there x y"
    bold = text.get_style_at_offset(console, 0)
    assert bold.color.name == "yellow"
    assert bold.bold
    plain = text.get_style_at_offset(console, 4)
    assert plain.color.name == "magenta"
    assert plain.bgcolor.triplet == (30, 30, 40)
    assert not plain.bold
    italic = text.get_style_at_offset(console, 9)
    assert italic.italic and italic.underline
    code = text.get_style_at_offset(console, 11)
    assert code.bold


def test_unbalanced_markers_print_literally():
    renderer = StreamRenderer()

    assert renderer.render_inline("**Hel").plain == "**Hel"


def test_line_breaks_survive():
    renderer = StreamRenderer()

    assert renderer.render_inline("one\ntwo").plain == "one\ntwo"


def test_entities_print_as_written():
    renderer = StreamRenderer()

    assert renderer.render_inline("a &amp; b &lt;div&gt; **c &copy;**").plain == "a &amp; b &lt;div&gt; c &copy;"
