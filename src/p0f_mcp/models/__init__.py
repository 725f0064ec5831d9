"""Data models for decoded lookup results."""

from .response import Response
