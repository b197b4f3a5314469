"""
ai/ - Natural Language Parsing
==============================
Gemini-backed parsing of free-text billing instructions.
"""
