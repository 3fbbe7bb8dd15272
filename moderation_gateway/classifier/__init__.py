"""Moderation classifier package.

  - prompt.py — fixed policy instruction + conversation builder
  - parser.py — fence stripping, chat-completion extraction, Verdict validation
  - engine.py — classify(): the single upstream round-trip and its failure modes
"""
