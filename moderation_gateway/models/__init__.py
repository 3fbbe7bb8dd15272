"""Moderation gateway models package.

Defines the shared data contracts used by the classifier and the HTTP surface:

  - verdict.py   — Verdict, the normalized {flagged, reason} decision
  - responses.py — Response builders for HTTP 200 verdicts and the error shape
"""
