"""Specification-style test runner for Python spec files.

The `specrun` package loads spec files, runs their nested `describe`
groups of examples, captures the outcome of every example and hands
the results to pluggable reporters.

Key features:
- a lifecycle hook registry for actions, filters and formatters;
- fault-isolated execution: one broken example or file never aborts
  the remaining suite;
- tag files that persist per-example markers (for example, known
  failures) across runs;
- optional randomized file order and dry-run/verify/report modes.
"""
