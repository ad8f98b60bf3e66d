"""Test suite for the specrun package.

This package contains unit and integration tests validating the action
registry, run states, protected execution, the file pipeline, tag file
persistence, reporters and the command-line interface.
"""
