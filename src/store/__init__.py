"""Embedded document store layer.

This module persists tables as JSON arrays over a key-value substrate.
It powers filtered queries and read-modify-write mutations for the SDK.
"""
