"""
LLM RPA Planner.

Turns natural-language instructions into structured browser automation
plans by asking a configurable LLM provider and normalizing its answer.
"""
