"""
Region-extraction and compositing pipeline.

raw segments -> ingest -> mask encoder (+ orientation) -> RegionIndex
pointer -> selection -> bindings -> render layers -> compositor
"""
