"""Core streaming modules: Value model, framing, frame I/O, and the pipeline.

WHY: These modules are the stable heart of the transcoder. Format modules
depend on the Value model; the pipeline depends on framing and frame I/O.
None of them know about any concrete serialization format.

HOW: value.py defines the intermediate tree, framing.py the boundary
rules, frames.py the reader/writer around them, pipeline.py the
producer/consumer run that ties everything together.

RULES:
- No format-specific logic in core
- Value variants are the contract between codecs; change them with care
"""
