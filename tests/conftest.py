"""Shared test fixtures for the pipecodec test suite.

WHY: Several test modules need the same Value trees and the same way of
running a pipeline in memory. Centralizing them here keeps every module
checking against one set of known data.

HOW: Fixtures hand out sample Values and a helper for running the
pipeline over in-memory streams.

RULES:
- sample_value contains every Value variant exactly as codecs must return it
- Streams are io.BytesIO; no test touches stdin or stdout
"""

import io

import pytest

from pipecodec.core.value import Array, Bool, Float, Integer, Map, Null, String


@pytest.fixture
def sample_value():
    """A Map covering every Value variant, including nesting."""
    return Map({
        "null": Null(),
        "flag": Bool(True),
        "count": Integer(-42),
        "ratio": Float(1.234),
        "name": String("café"),
        "items": Array((Integer(1), String("two"), Float(3.5))),
        "nested": Map({"inner": Bool(False)}),
    })


@pytest.fixture
def toml_safe_value():
    """A Map without Null, which TOML cannot carry."""
    return Map({
        "title": String("example"),
        "port": Integer(8080),
        "ratio": Float(0.5),
        "enabled": Bool(True),
        "tags": Array((String("a"), String("b"))),
        "owner": Map({"name": String("Tom")}),
    })


@pytest.fixture
def run_bytes():
    """Run the pipeline over in-memory streams and return the sink bytes."""
    from pipecodec.core.pipeline import run

    def _run(data, **kwargs):
        source = io.BytesIO(data)
        sink = io.BytesIO()
        run(source, sink, **kwargs)
        return sink.getvalue()

    return _run
