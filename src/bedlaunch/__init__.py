"""Launcher and configuration CLI for running a coding assistant on Bedrock or an HTTP API."""

__version__ = "0.7.0"
