import io
from types import SimpleNamespace

import pytest
from rich.console import Console


class FakeStream:
    """Async iterator over canned parts; Exception items are raised when reached."""

    def __init__(self, items):
        self.items = list(items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.items:
            raise StopAsyncIteration
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeOllamaClient:
    """Stands in for ollama.AsyncClient; records generate() calls."""

    def __init__(self, items=(), open_error=None):
        self.items = items
        self.open_error = open_error
        self.calls = []

    async def generate(self, **kwargs):
        self.calls.append(kwargs)
        if self.open_error is not None:
            raise self.open_error
        return FakeStream(self.items)


class RecordingFile(io.StringIO):
    """StringIO that snapshots its content every time it is flushed."""

    def __init__(self):
        super().__init__()
        self.snapshots = []

    def flush(self):
        self.snapshots.append(self.getvalue())
        super().flush()


def part(text, context=None, done=False):
    return SimpleNamespace(response=text, context=context, done=done)


@pytest.fixture
def make_part():
    return part


@pytest.fixture
def fake_client():
    return FakeOllamaClient


@pytest.fixture
def out_file():
    return RecordingFile()


@pytest.fixture
def err_file():
    return io.StringIO()


@pytest.fixture
def renderer(out_file, err_file):
    from tell.core.renderer import StreamRenderer

    return StreamRenderer(
        console=Console(file=out_file, color_system=None, width=80, soft_wrap=True),
        error_console=Console(file=err_file, color_system=None, width=200),
    )
